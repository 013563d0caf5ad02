"""Test logging configuration.

Tests for src.utils.logging_config:
    - JSON file output carries level, logger name and context fields
    - Human format puts context between level and message
    - Context push/pop
    - Repeated setup_logging() does not duplicate handlers
    - Size rotation config; unknown modes rejected

Run:
    pytest tests/test_logging.py -v
"""

import json
import logging
import logging.handlers

import pytest

from src.utils import logging_config


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    logging_config.pop_context()
    yield
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    for h in saved_handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(saved_level)
    logging_config.pop_context()
    logging.captureWarnings(False)


def _flush(handlers):
    for h in handlers:
        h.flush()


def test_json_file_output(tmp_path):
    log_file = tmp_path / 'logs' / 'golden.log'
    out = logging_config.setup_logging(
        log_level='DEBUG', log_file=str(log_file), json=True, to_stderr=False,
        context={'app': 'golden'},
    )
    logging_config.push_context(vector='cw_right_400')
    logging_config.get_logger('src.rasterizer.core').info("210 hits")
    _flush(out['handlers'])

    lines = log_file.read_text().strip().splitlines()
    record = json.loads(lines[-1])
    assert record['lvl'] == 'INFO'
    assert record['name'] == 'src.rasterizer.core'
    assert record['msg'] == '210 hits'
    assert record['app'] == 'golden'
    assert record['vector'] == 'cw_right_400'


def test_human_format_with_context():
    fmt = logging_config.ContextFormatter('human', use_color=False)
    logging_config.push_context(app='rasterize', vector='v1')
    record = logging.LogRecord('x', logging.WARNING, __file__, 1, "dropped %d", (3,), None)
    line = fmt.format(record)
    assert line.endswith('| app=rasterize vector=v1 | dropped 3')
    assert '| WARNING  |' in line


def test_formatter_rejects_unknown_mode():
    with pytest.raises(ValueError, match="Unknown format mode"):
        logging_config.ContextFormatter('xml')


def test_context_push_pop():
    logging_config.push_context(app='golden', file='basic.v1.yaml')
    logging_config.push_context(vector='a')
    assert logging_config.get_context() == {'app': 'golden', 'file': 'basic.v1.yaml', 'vector': 'a'}
    logging_config.pop_context(keys=['vector', 'missing'])
    assert logging_config.get_context() == {'app': 'golden', 'file': 'basic.v1.yaml'}
    logging_config.pop_context()
    assert logging_config.get_context() == {}


def test_get_context_is_a_copy():
    logging_config.push_context(app='golden')
    ctx = logging_config.get_context()
    ctx['app'] = 'changed'
    assert logging_config.get_context() == {'app': 'golden'}


def test_setup_idempotent(tmp_path):
    log_file = str(tmp_path / 'run.log')
    logging_config.setup_logging(log_file=log_file, to_stderr=False)
    out = logging_config.setup_logging(log_file=log_file, to_stderr=True)
    root = logging.getLogger()
    ours = [h for h in root.handlers if isinstance(h.formatter, logging_config.ContextFormatter)]
    assert len(ours) == 2
    assert set(ours) == set(out['handlers'])


def test_size_rotation(tmp_path):
    out = logging_config.setup_logging(
        log_file=str(tmp_path / 'r.log'), to_stderr=False,
        rotate={'mode': 'size', 'max_bytes': 1000, 'backup_count': 2},
    )
    assert isinstance(out['handlers'][0], logging.handlers.RotatingFileHandler)


def test_unknown_rotation_mode(tmp_path):
    with pytest.raises(ValueError, match="rotation mode"):
        logging_config.setup_logging(
            log_file=str(tmp_path / 'r.log'), to_stderr=False, rotate={'mode': 'weekly'},
        )


def test_set_level():
    logging_config.set_level('error')
    assert logging.getLogger().level == logging.ERROR
