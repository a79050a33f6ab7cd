"""Tests for server configuration and the credential store."""

import pytest

from socks5_proxy.core.config import ServerConfig
from socks5_proxy.core.credentials import CredentialStore, parse_user_entry
from socks5_proxy.core.exceptions import ConfigurationError, CredentialFileError, PasswordCheckerNotSetError
from socks5_proxy.core.lib.wire import Method


class TestServerConfig:
    def test_defaults_are_valid(self):
        config = ServerConfig()
        config.validate()
        assert config.auth_method == Method.NO_AUTH
        assert config.idle_timeout is None

    def test_password_without_checker(self):
        with pytest.raises(PasswordCheckerNotSetError):
            ServerConfig(auth_method=Method.PASSWORD).validate()

    def test_password_with_checker(self):
        ServerConfig(auth_method=Method.PASSWORD, password_checker=lambda u, p: True).validate()

    def test_unsupported_method(self):
        with pytest.raises(ConfigurationError):
            ServerConfig(auth_method=Method.GSSAPI).validate()

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigurationError, match="idle_timeout"):
            ServerConfig(idle_timeout=0).validate()


class TestCredentialStore:
    def test_check(self):
        store = CredentialStore({"admin": "123456", "lisi": "abde"})
        assert store.check(b"admin", b"123456")
        assert not store.check(b"admin", b"1234567")
        assert not store.check(b"nobody", b"123456")
        assert len(store) == 2
        assert "lisi" in store

    def test_password_may_contain_colons(self):
        assert parse_user_entry("svc:a:b:c") == ("svc", "a:b:c")

    @pytest.mark.parametrize("entry", ["nocolon", ":password"])
    def test_malformed_entry(self, entry):
        with pytest.raises(ValueError):
            parse_user_entry(entry)

    def test_from_file(self, tmp_path):
        path = tmp_path / "users.txt"
        path.write_text("# proxy users\n\nadmin:123456\n  zhangsan:1234  \n", encoding="utf-8")
        store = CredentialStore.from_file(path)
        assert store.check(b"admin", b"123456")
        assert store.check(b"zhangsan", b"1234")
        assert len(store) == 2

    def test_from_file_reports_line(self, tmp_path):
        path = tmp_path / "users.txt"
        path.write_text("admin:123456\nbroken\n", encoding="utf-8")
        with pytest.raises(CredentialFileError, match=":2:"):
            CredentialStore.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CredentialFileError):
            CredentialStore.from_file(tmp_path / "absent.txt")

    def test_merged_prefers_other(self):
        merged = CredentialStore({"a": "1", "b": "2"}).merged(CredentialStore({"b": "3"}))
        assert merged.check(b"a", b"1")
        assert merged.check(b"b", b"3")
        assert not merged.check(b"b", b"2")
