"""
Tests for text normalization and logging setup.
"""
import logging

from zkglossary.utils.logger import ColoredFormatter, setup_logging
from zkglossary.utils.text_normalizer import CachedTextNormalizer, norm_key, normalize


class TestNormalizer:

    def test_whitespace_and_punctuation(self):
        assert normalize("  zero  knowledge\n") == "zero knowledge"
        assert normalize("zk–SNARK") == "zk-SNARK"
        assert normalize("“quoted”") == '"quoted"'

    def test_norm_key_case(self):
        assert norm_key("Knowledge Soundness") == "knowledge soundness"
        assert norm_key("SNARK", case_sensitive=True) == "SNARK"

    def test_norm_key_separators(self):
        assert norm_key("zk-SNARK") == norm_key("zk SNARK") == norm_key("ZK_snark") == "zk snark"
        assert norm_key("non\u2011interactive") == "non interactive"
        assert normalize("zk-SNARK") == "zk-SNARK"

    def test_cache_info(self):
        CachedTextNormalizer.clear_cache()
        normalize("witness")
        normalize("witness")

        info = CachedTextNormalizer.get_cache_info()
        assert info['normalize_hits'] == 1
        assert info['normalize_misses'] == 1


class TestLogging:

    def test_file_handler_only_with_log_dir(self, temp_dir):
        logger = setup_logging("zkglossary.test_console")
        assert len(logger.handlers) == 1

        logger = setup_logging("zkglossary.test_file", log_dir=temp_dir / "logs", log_level="DEBUG")
        logger.info("written to file")
        for handler in logger.handlers:
            handler.flush()

        log_file = temp_dir / "logs" / "zkglossary.test_file.log"
        assert "written to file" in log_file.read_text(encoding="utf-8")

        for name in ("zkglossary.test_console", "zkglossary.test_file"):
            for handler in list(logging.getLogger(name).handlers):
                logging.getLogger(name).removeHandler(handler)
                handler.close()

    def test_setup_is_idempotent(self):
        first = setup_logging("zkglossary.test_idempotent")
        second = setup_logging("zkglossary.test_idempotent")

        assert first is second
        assert len(second.handlers) == 1
        second.removeHandler(second.handlers[0])

    def test_colored_formatter_restores_levelname(self):
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "msg", None, None)
        text = ColoredFormatter('[%(levelname)s] %(message)s').format(record)

        assert "\033[33m" in text
        assert record.levelname == "WARNING"
