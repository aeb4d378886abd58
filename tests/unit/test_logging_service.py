"""Tests for logging configuration."""

import logging

from waterbill.services.config import BillingConfig
from waterbill.services.logging import setup_logging


class TestSetupLogging:
    """Test billing run logging configuration."""

    def setup_method(self):
        """Save original handlers before each test."""
        self.root_logger = logging.getLogger()
        self.original_handlers = self.root_logger.handlers.copy()
        self.original_level = self.root_logger.level

    def teardown_method(self):
        """Restore original handlers after each test."""
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.original_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.original_level)

    def test_creates_log_directory(self, tmp_path) -> None:
        log_file = tmp_path / "nested" / "billing.log"
        assert not log_file.parent.exists()

        setup_logging(BillingConfig(log_file=str(log_file)))

        assert log_file.parent.exists()

    def test_creates_stdout_and_file_handlers(self, tmp_path) -> None:
        setup_logging(BillingConfig(log_file=str(tmp_path / "billing.log")))

        assert len(self.root_logger.handlers) == 2
        assert any(isinstance(h, logging.FileHandler) for h in self.root_logger.handlers)

    def test_returns_package_logger(self, tmp_path) -> None:
        logger = setup_logging(BillingConfig(log_file=str(tmp_path / "billing.log")))

        assert logger.name == "waterbill"

    def test_level_from_config(self, tmp_path) -> None:
        config = BillingConfig(log_file=str(tmp_path / "billing.log"), log_level="WARNING")

        setup_logging(config)

        assert self.root_logger.level == logging.WARNING
        for handler in self.root_logger.handlers:
            assert handler.level == logging.WARNING

    def test_level_filters_file_output(self, tmp_path) -> None:
        log_file = tmp_path / "billing.log"
        setup_logging(BillingConfig(log_file=str(log_file), log_level="ERROR"))

        logging.getLogger("waterbill.services.invoice_service").info("Built 3 invoices")
        logging.getLogger("waterbill.cli.billing").error("Billing run failed")

        contents = log_file.read_text(encoding="utf-8")
        assert "Built 3 invoices" not in contents
        assert "Billing run failed" in contents

    def test_writes_formatted_messages_to_file(self, tmp_path) -> None:
        log_file = tmp_path / "billing.log"
        setup_logging(BillingConfig(log_file=str(log_file)))

        logging.getLogger("waterbill.services.invoice_service").info("Built 3 invoices")

        contents = log_file.read_text(encoding="utf-8")
        assert "Built 3 invoices" in contents
        assert "waterbill.services.invoice_service" in contents
        assert "INFO" in contents
        assert "[20" in contents

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path) -> None:
        dummy_handler = logging.StreamHandler()
        self.root_logger.addHandler(dummy_handler)
        config = BillingConfig(log_file=str(tmp_path / "billing.log"))

        setup_logging(config)
        setup_logging(config)

        assert len(self.root_logger.handlers) == 2
        assert dummy_handler not in self.root_logger.handlers
