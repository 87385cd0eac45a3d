"""Tests for cache directory ownership normalization."""

import os
import subprocess
from unittest.mock import patch

import pytest

from archivecache.cache.permissions import grant_permission
from archivecache.exceptions import CacheError, CachePermissionError


class TestGrantPermission:
    """Test grant_permission."""

    def test_runs_recursive_chown_for_current_user(self, tmp_path, chown_ok):
        """Test that sudo chown -R is run with the current uid:gid."""
        grant_permission(tmp_path)

        chown_ok.assert_called_once()
        command = chown_ok.call_args[0][0]
        assert command == [
            "sudo",
            "chown",
            "-R",
            f"{os.getuid()}:{os.getgid()}",
            str(tmp_path),
        ]
        assert chown_ok.call_args[1]["check"] is False

    def test_runs_even_when_already_owned(self, tmp_path, chown_ok):
        """Test that ownership is changed on every call."""
        grant_permission(tmp_path)
        grant_permission(tmp_path)

        assert chown_ok.call_count == 2

    def test_nonzero_exit_code_raises(self, tmp_path):
        """Test that a failing chown raises with its exit code."""
        with patch("archivecache.cache.permissions.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                [], 1, "", "chown: Operation not permitted"
            )
            with pytest.raises(CachePermissionError, match="exited with code 1") as exc:
                grant_permission(tmp_path)

        assert exc.value.exit_code == 1
        assert isinstance(exc.value, CacheError)

    def test_missing_sudo_raises(self, tmp_path):
        """Test that a missing executable raises CachePermissionError."""
        with patch("archivecache.cache.permissions.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError("sudo")
            with pytest.raises(CachePermissionError) as exc:
                grant_permission(tmp_path)

        assert exc.value.exit_code is None

    def test_missing_directory_still_chowned(self, tmp_path, chown_ok):
        """Test that chown runs for a directory that does not exist yet."""
        missing = tmp_path / "not-created"

        grant_permission(missing)

        chown_ok.assert_called_once()
        assert chown_ok.call_args[0][0][-1] == str(missing)

    def test_missing_directory_chown_failure_raises(self, tmp_path):
        """Test that chown failing on a missing directory is an error."""
        with patch("archivecache.cache.permissions.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(
                [], 1, "", "chown: cannot access: No such file or directory"
            )
            with pytest.raises(CachePermissionError) as exc:
                grant_permission(tmp_path / "not-created")

        assert exc.value.exit_code == 1
