"""Tests for the ASGI and serverless entrypoints."""

import importlib
import runpy
from pathlib import Path

import pytest
from fastapi import FastAPI

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def service_env(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "header.payload.signature")
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")


def test_asgi_module_exposes_app(service_env) -> None:
    module = importlib.import_module("niume_ai.api.asgi")

    assert isinstance(module.app, FastAPI)


def test_serverless_shim_exposes_app(service_env) -> None:
    namespace = runpy.run_path(str(ROOT / "api" / "index.py"))

    assert isinstance(namespace["app"], FastAPI)
