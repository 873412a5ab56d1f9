from config import DEFAULT_PROXIES, DEFAULT_READABILITY, Config, get_logger


def test_logger_namespace():
    assert get_logger("fetcher").name == "BoringReader.fetcher"


def test_invalid_env_values_fall_back(monkeypatch, tmp_path):
    monkeypatch.setenv("MAX_ATTEMPTS", "zero")
    monkeypatch.setenv("HTTP_TIMEOUT", "0.1")
    monkeypatch.setenv("CACHE_CAPACITY", "25")
    monkeypatch.setenv("READER_CONFIG_PATH", str(tmp_path / "missing.yaml"))

    cfg = Config()

    assert cfg.MAX_ATTEMPTS == 3
    assert cfg.HTTP_TIMEOUT == 10.0
    assert cfg.CACHE_CAPACITY == 25
    assert cfg.PROXIES == DEFAULT_PROXIES
    assert cfg.READABILITY == DEFAULT_READABILITY


def test_jitter_max_below_min_is_clamped(monkeypatch, tmp_path):
    monkeypatch.setenv("REQUEST_JITTER_MIN", "1.0")
    monkeypatch.setenv("REQUEST_JITTER_MAX", "0.5")
    monkeypatch.setenv("READER_CONFIG_PATH", str(tmp_path / "missing.yaml"))

    cfg = Config()

    assert cfg.REQUEST_JITTER_MIN == cfg.REQUEST_JITTER_MAX == 1.0


def test_reader_file_overrides(monkeypatch, tmp_path):
    reader_file = tmp_path / "reader.yaml"
    reader_file.write_text(
        "proxies:\n"
        "  - direct\n"
        "  - type: http\n"
        "    url: http://proxy.internal:3128\n"
        "readability:\n"
        "  char_threshold: 500\n"
        "  bogus_option: 1\n"
    )
    monkeypatch.setenv("READER_CONFIG_PATH", str(reader_file))

    cfg = Config()

    assert cfg.PROXIES == ["direct", {"type": "http", "url": "http://proxy.internal:3128"}]
    assert cfg.READABILITY["char_threshold"] == 500
    assert cfg.READABILITY["nb_top_candidates"] == 10
    assert "bogus_option" not in cfg.READABILITY


def test_malformed_reader_file_keeps_defaults(monkeypatch, tmp_path):
    reader_file = tmp_path / "reader.yaml"
    reader_file.write_text("proxies: [unclosed\n")
    monkeypatch.setenv("READER_CONFIG_PATH", str(reader_file))

    cfg = Config()

    assert cfg.PROXIES == DEFAULT_PROXIES
    assert cfg.get_config_summary()["proxy_count"] == len(DEFAULT_PROXIES)
