"""
Tests for the Eligibility Engine.

This package contains tests for:
- URL templating and authentication injection
- CPF and credential masking
- Response interpretation (status, JSON compare, extraction)
- Rule orchestration and on_error policies
- Mock upstream API, CLI and export columns
"""
