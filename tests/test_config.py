"""Tests for configuration loading."""

import json

import pytest
from pydantic import ValidationError

from config import Config, load_config, split_server_address, CONFIG_FILE_ENV
from shortener.storage import create_storage, MemoryStorage, FileStorage, PostgresStorage


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and .env file."""
    for name in ["BASE_URL", "FILE_STORAGE_PATH", "DATABASE_DSN", "SECRET_KEY", "SERVER_ADDRESS",
                 "TRUSTED_SUBNET", "HOST", "PORT", CONFIG_FILE_ENV]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestConfig:
    """Test configuration sources."""
    
    def test_defaults(self):
        config = Config()
        
        assert config.host == "localhost"
        assert config.port == 8080
        assert config.base_url == "http://localhost:8080"
        assert config.file_storage_path == "storage.txt"
        assert config.database_dsn == ""
        assert config.short_code_bytes == 6
    
    def test_environment(self, monkeypatch):
        monkeypatch.setenv("BASE_URL", "https://s.example/")
        monkeypatch.setenv("DATABASE_DSN", "postgresql://u:p@db/urls")
        
        config = Config()
        
        assert config.base_url == "https://s.example"
        assert config.database_dsn == "postgresql://u:p@db/urls"
    
    def test_json_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"base_url": "http://json.example", "trusted_subnet": "10.0.0.0/8"}))
        
        monkeypatch.setenv(CONFIG_FILE_ENV, str(config_file))
        
        config = load_config(config_file=str(config_file))
        
        assert config.base_url == "http://json.example"
        assert config.trusted_subnet == "10.0.0.0/8"
    
    def test_priority(self, tmp_path, monkeypatch):
        """Test flags beat environment, which beats the JSON file."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "base_url": "http://json.example",
            "secret_key": "from-json",
            "trusted_subnet": "10.0.0.0/8",
        }))
        monkeypatch.setenv("SECRET_KEY", "from-env")
        monkeypatch.setenv("BASE_URL", "http://env.example")
        monkeypatch.setenv(CONFIG_FILE_ENV, str(config_file))
        
        config = load_config(config_file=str(config_file), base_url="http://flag.example", database_dsn=None)
        
        assert config.base_url == "http://flag.example"
        assert config.secret_key == "from-env"
        assert config.trusted_subnet == "10.0.0.0/8"
        assert config.database_dsn == ""
    
    @pytest.mark.parametrize("base_url", ["localhost:8080", "ftp://example.com"])
    def test_invalid_base_url(self, base_url):
        with pytest.raises(ValidationError):
            Config(base_url=base_url)
    
    def test_invalid_code_width(self):
        with pytest.raises(ValidationError):
            Config(short_code_bytes=0)


class TestStorageFactory:
    """Test backend selection."""
    
    @pytest.mark.asyncio
    async def test_postgres_wins(self, tmp_path):
        config = Config(database_dsn="postgresql://u:p@db:5432/urls", file_storage_path=str(tmp_path / "s.txt"))
        
        storage = create_storage(config)
        
        assert isinstance(storage, PostgresStorage)
        assert not (tmp_path / "s.txt").exists()
    
    @pytest.mark.asyncio
    async def test_file(self, tmp_path):
        config = Config(file_storage_path=str(tmp_path / "s.txt"))
        
        storage = create_storage(config)
        
        assert isinstance(storage, FileStorage)
        await storage.close()
    
    @pytest.mark.asyncio
    async def test_memory(self):
        storage = create_storage(Config(file_storage_path=""))
        
        assert type(storage) is MemoryStorage


class TestServerAddress:
    """Test the host:port listen address."""
    
    @pytest.mark.parametrize("address,expected", [
        ("localhost:9090", ("localhost", 9090)),
        (":9090", (None, 9090)),
        ("0.0.0.0:80", ("0.0.0.0", 80)),
        ("example.com", ("example.com", None)),
        (None, (None, None)),
    ])
    def test_split_server_address(self, address, expected):
        assert split_server_address(address) == expected
    
    def test_split_server_address_invalid_port(self):
        with pytest.raises(ValueError):
            split_server_address("localhost:http")
    
    def test_json_file_server_address(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"server_address": "0.0.0.0:9090", "base_url": "http://json.example"}))
        monkeypatch.setenv(CONFIG_FILE_ENV, str(config_file))
        
        config = load_config(config_file=str(config_file))
        
        assert config.host == "0.0.0.0"
        assert config.port == 9090
    
    def test_environment_server_address(self, monkeypatch):
        monkeypatch.setenv("SERVER_ADDRESS", "127.0.0.1:7070")
        
        config = Config()
        
        assert (config.host, config.port) == ("127.0.0.1", 7070)
    
    def test_flag_beats_json_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"server_address": "0.0.0.0:9090"}))
        monkeypatch.setenv(CONFIG_FILE_ENV, str(config_file))
        
        config = load_config(config_file=str(config_file), server_address=":8181")
        
        assert config.host == "localhost"
        assert config.port == 8181
    
    def test_invalid_server_address(self):
        with pytest.raises(ValidationError):
            Config(server_address="localhost:http")
