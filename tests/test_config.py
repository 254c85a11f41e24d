from bucketindex.core.config import Settings


def _settings(**env):
    base = {
        "R2_ACCOUNT_ID": "acct123",
        "R2_BUCKET_NAME": "files",
        "R2_ACCESS_KEY_ID": "AKIDEXAMPLE",
        "R2_SECRET_ACCESS_KEY": "secret-value",
    }
    base.update(env)
    return Settings(_env_file=None, **base)


def test_can_presign_requires_all_four_fields():
    assert _settings().can_presign()
    for field in ("R2_ACCOUNT_ID", "R2_BUCKET_NAME", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY"):
        assert not _settings(**{field: "  "}).can_presign()


def test_identity_and_credentials_are_trimmed():
    s = _settings(R2_ACCOUNT_ID=" acct123 ", R2_SECRET_ACCESS_KEY=" secret-value\n")
    assert s.bucket_identity().host == "files.acct123.r2.cloudflarestorage.com"
    creds = s.credentials()
    assert creds.access_key_id == "AKIDEXAMPLE"
    assert creds.secret_access_key.get_secret_value() == "secret-value"
    assert "secret-value" not in repr(creds)


def test_endpoint_url():
    assert _settings().endpoint_url == "https://acct123.r2.cloudflarestorage.com"
    assert _settings(R2_ENDPOINT="http://localhost:9000").endpoint_url == "http://localhost:9000"
    assert _settings(R2_ACCOUNT_ID="").endpoint_url is None


def test_only_read_settings_are_declared():
    assert "env" not in Settings.model_fields
    assert _settings(LOG_LEVEL="debug").log_level == "debug"
