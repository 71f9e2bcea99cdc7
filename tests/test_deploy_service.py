"""Tests for Deploy service."""

from pathlib import Path

import pytest

from certctl import trust_helper
from certctl.services.remote_service import CommandError


@pytest.mark.unit
class TestDeployCA:
    """Test distributing the CA bundle."""

    def test_deploy_ca(self, app_config, deploy_service, created_hierarchy, fake_run):
        deploy_service.deploy_ca("web01")

        bundle = str(app_config.paths.ca_bundle)
        assert fake_run.commands == [
            ["scp", "-P", "22", bundle, "root@web01:/etc/pki/ca-trust/source/anchors/"],
            ["scp", "-P", "22", trust_helper.__file__, "root@web01:/usr/bin/certctl-trust"],
        ]

    def test_deploy_ca_from_any_directory(self, work_dir, deploy_service, created_hierarchy, fake_run, monkeypatch):
        """Test that the default helper is found outside the source checkout."""
        monkeypatch.chdir(work_dir)
        assert not (work_dir / "main.py").exists()

        deploy_service.deploy_ca("host1")

        assert len(fake_run.commands) == 2
        assert Path(fake_run.commands[1][3]).is_file()

    def test_installed_script_is_the_copied_one(self, app_config, deploy_service, created_hierarchy, fake_run):
        """Test that the install command runs the file deploy_ca copied."""
        deploy_service.deploy_ca("web01")
        deploy_service.install_ca_remote("web01")

        copied_to = fake_run.commands[1][-1].split(":", 1)[1]
        assert copied_to in fake_run.commands[2][-1]
        assert fake_run.commands[2][-1].endswith(" 4")

    def test_deploy_ca_custom_script(self, work_dir, app_config, deploy_service, created_hierarchy, fake_run):
        script = work_dir / "refresh-trust"
        script.write_text("#!/bin/sh\nupdate-ca-trust\n")
        app_config.remote.script_source = str(script)

        deploy_service.deploy_ca("web01")

        assert fake_run.commands[1][3] == str(script)

    def test_deploy_ca_missing_custom_script_fails(
        self, work_dir, app_config, deploy_service, created_hierarchy, fake_run
    ):
        app_config.remote.script_source = str(work_dir / "missing.sh")

        with pytest.raises(FileNotFoundError, match="missing.sh"):
            deploy_service.deploy_ca("web01")

        assert fake_run.commands == []

    def test_deploy_ca_without_script(self, app_config, deploy_service, created_hierarchy, fake_run):
        app_config.remote.copy_script = False

        deploy_service.deploy_ca("web01")

        assert len(fake_run.commands) == 1

    def test_deploy_ca_without_bundle_fails(self, deploy_service, fake_run):
        """Test that missing local files fail before any network call."""
        with pytest.raises(FileNotFoundError, match="RootCA-All.pem"):
            deploy_service.deploy_ca("web01")

        assert fake_run.commands == []

    def test_deploy_ca_scp_failure(self, deploy_service, created_hierarchy, fake_run):
        fake_run.returncode = 1

        with pytest.raises(CommandError) as exc_info:
            deploy_service.deploy_ca("web01")

        assert exc_info.value.returncode == 1
        assert len(fake_run.commands) == 1


@pytest.mark.unit
class TestTrustInstall:
    """Test refreshing trust stores."""

    def test_install_ca_remote(self, deploy_service, fake_run):
        deploy_service.install_ca_remote("web01")

        assert fake_run.commands == [["ssh", "-p", "22", "root@web01", "python3 /usr/bin/certctl-trust 4"]]

    def test_install_ca_local(self, deploy_service, fake_run):
        deploy_service.install_ca_local()

        assert fake_run.commands == [["update-ca-trust"]]

    def test_install_ca_local_custom_command(self, app_config, deploy_service, fake_run):
        app_config.trust.update_command = ["update-ca-certificates", "--fresh"]

        deploy_service.install_ca_local()

        assert fake_run.commands == [["update-ca-certificates", "--fresh"]]


@pytest.mark.unit
class TestDeployCertificate:
    """Test distributing server certificates."""

    def test_deploy_certificate(self, deploy_service, created_cert, fake_run):
        remote_dir = deploy_service.deploy_certificate("host1", "web01")

        assert remote_dir == "/etc/ssl/web01.example.com/"
        assert fake_run.commands == [
            ["ssh", "-p", "22", "root@host1", "mkdir -p /etc/ssl/web01.example.com/"],
            ["scp", "-P", "22", created_cert.cert_file, created_cert.key_file, "root@host1:/etc/ssl/web01.example.com/"],
        ]

    def test_deploy_certificate_without_mkdir(self, app_config, deploy_service, created_cert, fake_run):
        app_config.remote.create_dirs = False

        deploy_service.deploy_certificate("host1", "web01")

        assert len(fake_run.commands) == 1
        assert fake_run.commands[0][0] == "scp"

    def test_deploy_missing_certificate_fails(self, deploy_service, created_hierarchy, fake_run):
        with pytest.raises(FileNotFoundError, match="web01.example.com.crt"):
            deploy_service.deploy_certificate("host1", "web01")

        assert fake_run.commands == []

    def test_mkdir_failure_stops_copy(self, deploy_service, created_cert, fake_run):
        fake_run.returncode = 255

        with pytest.raises(CommandError) as exc_info:
            deploy_service.deploy_certificate("host1", "web01")

        assert exc_info.value.returncode == 255
        assert len(fake_run.commands) == 1


@pytest.mark.unit
class TestCopyPublicKey:
    def test_copy_public_key(self, deploy_service, fake_run):
        deploy_service.copy_public_key("web01")

        assert fake_run.commands == [["ssh-copy-id", "-p", "22", "root@web01"]]
