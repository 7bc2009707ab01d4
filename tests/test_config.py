"""Tests for configuration and policy documents."""
from __future__ import annotations

from pathlib import Path

import pytest

from trustpolicy.config import CERT_DIR_ENV, LINUX_CERT_DIR, InstallerConfig, load_config
from trustpolicy.policy.documents import (
    ENTERPRISE_ROOT_POLICY,
    DocumentShape,
    install_cert_policy,
    remove_cert_policy,
)


class TestInstallerConfig:
    def test_defaults(self):
        config = InstallerConfig()
        assert config.certificate_name == "trustpolicy.crt"
        assert config.certificate_path == LINUX_CERT_DIR / "trustpolicy.crt"
        assert config.stale_certificate_path == "/opt/trustpolicy/auth/root-ca.crt"
        assert config.autoconfig_pref_name == "trustpolicy-prefs.js"
        assert config.autoconfig_cfg_name == "trustpolicy-config.cfg"

    def test_overrides_ignore_none(self):
        config = InstallerConfig().with_overrides(app_name=None, restart_page="about:blank")
        assert config.app_name == "trustpolicy"
        assert config.restart_page == "about:blank"

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CERT_DIR_ENV, str(tmp_path))
        assert load_config().linux_cert_dir == tmp_path

    def test_explicit_override_beats_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CERT_DIR_ENV, "/somewhere/else")
        assert load_config(linux_cert_dir=tmp_path).linux_cert_dir == tmp_path

    def test_frozen(self):
        with pytest.raises(Exception):
            InstallerConfig().app_name = "other"  # type: ignore[misc]


class TestPolicyDocuments:
    def test_enterprise_roots(self):
        assert ENTERPRISE_ROOT_POLICY.shape is DocumentShape.ENTERPRISE_ROOTS
        assert ENTERPRISE_ROOT_POLICY.to_json() == (
            '{"policies": {"Certificates": {"ImportEnterpriseRoots": true}}}'
        )

    def test_named_certificate_documents(self):
        config = InstallerConfig(app_name="acme", linux_cert_dir=Path("/tmp"))
        assert install_cert_policy(config).to_dict() == {
            "policies": {"Certificates": {"Install": ["acme.crt"]}}
        }
        assert remove_cert_policy(config).to_dict() == {
            "policies": {"Certificates": {"Install": ["/opt/acme/auth/root-ca.crt"]}}
        }

    def test_documents_are_immutable(self):
        with pytest.raises(TypeError):
            ENTERPRISE_ROOT_POLICY.content["policies"] = {}  # type: ignore[index]

    def test_to_dict_returns_copy(self):
        copy = ENTERPRISE_ROOT_POLICY.to_dict()
        copy["policies"]["Certificates"]["ImportEnterpriseRoots"] = False
        assert ENTERPRISE_ROOT_POLICY.to_dict()["policies"]["Certificates"]["ImportEnterpriseRoots"] is True
