"""Test logging setup, phase timing and the random source.

Tests for contrast_scale.utils.logging_config, profiler, rng:
    - setup_logging is idempotent (no duplicated file lines)
    - JSON lines carry pushed context fields
    - Human format includes context and level
    - pop_context removes fields
    - timer reports elapsed time to its sink
    - make_rng is reproducible and reports the seed it used

Test cases:
    - test_logging_idempotency()
    - test_human_format_context()
    - test_pop_context()
    - test_setup_from_config()
    - test_timer_sink()
    - test_timer_log_sink()
    - test_make_rng_reproducible()
    - test_make_rng_entropy_seed()

Run:
    pytest tests/test_logging.py -v
"""

import json
import logging

from contrast_scale.utils import logging_config, profiler, rng
from contrast_scale.utils.validators import LoggingConfig


# ============================================================================
# LOGGING
# ============================================================================

def test_logging_idempotency(tmp_path):
    """Reconfiguring replaces handlers instead of stacking them."""
    log_path = tmp_path / "search.log"

    logging_config.setup_logging(
        level="INFO", file=str(log_path), json=True, to_stderr=False, context={"app": "test"}
    )
    logger = logging_config.get_logger("contrast_scale.test")
    logger.info("hello")

    logging_config.setup_logging(
        level="INFO", file=str(log_path), json=True, to_stderr=False, context={"app": "test"}
    )
    logging_config.push_context(distance=572)
    logger.info("world")

    lines = log_path.read_text().strip().splitlines()
    assert len(lines) == 2

    first, second = (json.loads(line) for line in lines)
    assert first["msg"] == "hello"
    assert first["app"] == "test"
    assert "distance" not in first
    assert second["distance"] == 572
    assert second["lvl"] == "INFO"


def test_human_format_context():
    formatter = logging_config.ContextFormatter("human", use_color=False)
    logging_config.push_context(app="search", seed=7)
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "Escalated", None, None)

    line = formatter.format(record)
    assert line.endswith("| WARNING  | app=search seed=7 | Escalated")


def test_pop_context():
    logging_config.push_context(app="search", distance=1)
    logging_config.pop_context(["distance"])
    assert logging_config.get_context() == {"app": "search"}
    logging_config.pop_context()
    assert logging_config.get_context() == {}


def test_setup_from_config(tmp_path):
    log_path = tmp_path / "logs" / "run.log"
    cfg = LoggingConfig(level="debug", file=str(log_path), rotate_max_bytes=1_000_000)

    handlers = logging_config.setup_logging_from_config(cfg, context={"app": "cfg"})

    assert logging.getLogger().level == logging.DEBUG
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in handlers)
    logging_config.get_logger("contrast_scale.test").debug("detail")
    for h in handlers:
        h.flush()
    assert "app=cfg | detail" in log_path.read_text()


# ============================================================================
# PROFILER
# ============================================================================

def test_timer_sink():
    times = []
    with profiler.timer("op", sink=lambda name, t: times.append((name, t))):
        sum(range(10_000))
    assert len(times) == 1
    assert times[0][0] == "op"
    assert times[0][1] >= 0


def test_timer_log_sink(caplog):
    logger = logging.getLogger("contrast_scale.test.timer")
    with caplog.at_level(logging.INFO, logger="contrast_scale.test.timer"):
        with profiler.timer("load_catalog", sink=profiler.log_sink(logger)):
            pass
    assert caplog.records[-1].getMessage().startswith("load_catalog: ")
    assert caplog.records[-1].getMessage().endswith(" s")


# ============================================================================
# RNG
# ============================================================================

def test_make_rng_reproducible():
    gen1, seed1 = rng.make_rng(42)
    gen2, seed2 = rng.make_rng(42)
    assert seed1 == seed2 == 42
    assert gen1.integers(0, 1000, size=10).tolist() == gen2.integers(0, 1000, size=10).tolist()


def test_make_rng_entropy_seed():
    """Without a seed, a fresh one is drawn and returned for replay."""
    gen, seed = rng.make_rng()
    replay, _ = rng.make_rng(seed)
    assert isinstance(seed, int) and seed >= 0
    assert gen.integers(0, 1 << 30) == replay.integers(0, 1 << 30)
