"""Unit tests for ProcessorConfig presets and validation."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import dataclasses

import pytest

from docstitch.core.config import ErrorHandlingStrategy, ProcessorConfig
from docstitch.core.document_processor import DocumentProcessor


class TestPresets:
    def test_default(self):
        config = ProcessorConfig.default()
        assert config.enable_table_extraction
        assert config.table_as_html
        assert config.max_document_size_mb == 100
        assert config.error_handling_strategy == ErrorHandlingStrategy.FAIL_FAST

    def test_rag_optimized(self):
        config = ProcessorConfig.rag_optimized()
        assert config.table_as_html
        assert config.error_handling_strategy == ErrorHandlingStrategy.LOG_AND_CONTINUE

    def test_high_performance(self):
        config = ProcessorConfig.high_performance()
        assert not config.table_as_html
        assert config.max_document_size_mb == 50
        assert not config.verbose_logging

    def test_size_in_bytes(self):
        assert ProcessorConfig(max_document_size_mb=2).max_document_size_bytes == 2 * 1024 * 1024


class TestValidation:
    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ProcessorConfig().table_as_html = False

    @pytest.mark.parametrize("size", [0, -5])
    def test_non_positive_size(self, size):
        with pytest.raises(ValueError):
            ProcessorConfig(max_document_size_mb=size).validate()

    def test_bad_strategy(self):
        with pytest.raises(ValueError):
            ProcessorConfig(error_handling_strategy="ignore").validate()

    def test_processor_validates_config(self):
        with pytest.raises(ValueError):
            DocumentProcessor(ProcessorConfig(max_document_size_mb=0))
