"""网络工具测试"""

from __future__ import annotations

import io
import urllib.error
from unittest.mock import patch

import pytest

from cargocache.core.exceptions import DependencyError, ValidationError
from cargocache.utils.net import get_json, validate_url_scheme


class TestValidateUrlScheme:
    def test_https_ok(self) -> None:
        validate_url_scheme("https://crates.io/api/v1/crates/sccache")

    def test_file_rejected(self) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            validate_url_scheme("file:///etc/passwd")

    def test_context_in_error(self) -> None:
        with pytest.raises(ValidationError, match="version lookup"):
            validate_url_scheme("ftp://x", context="version lookup")


class TestGetJson:
    def test_parses_body(self) -> None:
        with patch("urllib.request.urlopen", return_value=io.BytesIO(b'{"a": 1}')):
            assert get_json("https://example.com/x") == {"a": 1}

    def test_network_error(self) -> None:
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
            with pytest.raises(DependencyError, match="请求失败"):
                get_json("https://example.com/x")

    def test_invalid_json(self) -> None:
        with patch("urllib.request.urlopen", return_value=io.BytesIO(b"<html>")):
            with pytest.raises(DependencyError):
                get_json("https://example.com/x")
