"""End-to-end CLI tests for `pvsadm image import` argument handling.

Every case here fails validation before any network call is made.
"""

REQUIRED = [
    "--workspace-name", "upstream-core-lon04",
    "-b", "power-images",
    "-r", "us-south",
    "--object", "rhel-83-10032020.ova.gz",
    "--pvs-image-name", "test-image",
]


# ── CLI help ───────────────────────────────────────────────────────


def test_help(run_cli):
    rc, stdout, _ = run_cli("--help")
    assert rc == 0
    assert "image" in stdout


def test_image_import_help(run_cli):
    rc, stdout, _ = run_cli("image", "import", "--help")
    assert rc == 0
    assert "--bucket" in stdout
    assert "--pvs-storagetype" in stdout
    assert "--watch-timeout" in stdout
    assert "IBMCLOUD_API_KEY" in stdout
    # deprecated aliases are hidden
    assert "--pvs-instance-name" not in stdout


def test_image_requires_action(run_cli):
    rc, _, stderr = run_cli("image")
    assert rc == 2
    assert "action" in stderr


# ── Pre-run validation ─────────────────────────────────────────────


def test_missing_required_flags(run_cli):
    rc, stdout, _ = run_cli("image", "import", "--workspace-name", "ws", "--api-key", "x" * 20)
    assert rc == 1
    assert "--bucket" in stdout
    assert "--bucket-region" in stdout
    assert "--pvs-image-name" in stdout
    assert "--object" in stdout


def test_accesskey_without_secretkey(run_cli):
    rc, stdout, _ = run_cli("image", "import", *REQUIRED, "--accesskey", "AK", "--api-key", "x" * 20)
    assert rc == 1
    assert "required both --accesskey and --secretkey values" in stdout


def test_missing_workspace(run_cli):
    rc, stdout, _ = run_cli("image", "import", *REQUIRED[2:], "--api-key", "x" * 20)
    assert rc == 1
    assert "--workspace-id or --workspace-name required" in stdout


def test_missing_api_key(run_cli):
    rc, stdout, _ = run_cli("image", "import", *REQUIRED)
    assert rc == 1
    assert "IBM Cloud API key required" in stdout


def test_invalid_watch_timeout(run_cli):
    rc, stdout, _ = run_cli("image", "import", *REQUIRED, "--watch-timeout", "soon", "--api-key", "x" * 20)
    assert rc == 1
    assert "invalid duration" in stdout


def test_invalid_env_choice(run_cli):
    rc, _, stderr = run_cli("image", "import", *REQUIRED, "--env", "staging")
    assert rc == 2
    assert "--env" in stderr


def test_missing_config_file(run_cli, tmp_path):
    rc, stdout, _ = run_cli("image", "import", *REQUIRED, "--config", str(tmp_path / "missing.yaml"))
    assert rc == 1
    assert "not found" in stdout


def test_config_file_supplies_required_flags(run_cli, tmp_path):
    config_path = tmp_path / "pvsadm.yaml"
    config_path.write_text(
        "image_import:\n"
        "  workspace_name: upstream-core-lon04\n"
        "  bucket: power-images\n"
        "  region: us-south\n"
        "  object_name: rhel-83-10032020.ova.gz\n"
        "  image_name: test-image\n"
    )

    rc, stdout, _ = run_cli("image", "import", "--config", str(config_path))

    # Flags are satisfied, so validation gets as far as the API key
    assert rc == 1
    assert "IBM Cloud API key required" in stdout


def test_deprecated_workspace_alias_warns(run_cli):
    rc, stdout, stderr = run_cli(
        "image", "import", "-n", "upstream-core-lon04", *REQUIRED[2:],
    )
    assert rc == 1
    assert "-n has been deprecated, --workspace-name should be used" in stderr
    assert "IBM Cloud API key required" in stdout
