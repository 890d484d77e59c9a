# tests/test_config.py
import pytest

from quotation_generator import create_app
from quotation_generator.config import (
    DevelopmentConfig,
    ProductionConfig,
    get_config_name,
    normalize_database_url,
)
from quotation_generator.errors import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in ('DATABASE_URL', 'API_ACCESS_KEY', 'SECRET_KEY', 'FLASK_ENV', 'TESTING', 'CI', 'CORS_ORIGINS'):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_missing_connection_parameters(clean_env):
    with pytest.raises(ConfigurationError) as exc:
        DevelopmentConfig()
    assert 'DATABASE_URL' in str(exc.value)
    assert 'API_ACCESS_KEY' in str(exc.value)


def test_app_refuses_to_start_without_access_key(clean_env):
    clean_env.setenv('DATABASE_URL', 'sqlite:///:memory:')
    with pytest.raises(ConfigurationError):
        create_app('development')


def test_development_config_reads_environment(clean_env):
    clean_env.setenv('DATABASE_URL', 'postgres://user:pw@db/quotes')
    clean_env.setenv('API_ACCESS_KEY', 'k')
    cfg = DevelopmentConfig()
    assert cfg.SQLALCHEMY_DATABASE_URI == 'postgresql://user:pw@db/quotes'
    assert cfg.API_ACCESS_KEY == 'k'


def test_production_requires_secret_key(clean_env):
    clean_env.setenv('DATABASE_URL', 'sqlite:///:memory:')
    clean_env.setenv('API_ACCESS_KEY', 'k')
    with pytest.raises(ConfigurationError):
        ProductionConfig()

    clean_env.setenv('SECRET_KEY', 's3cret')
    clean_env.setenv('CORS_ORIGINS', 'https://app.example.com, https://admin.example.com')
    cfg = ProductionConfig()
    assert cfg.CORS_ORIGINS == ['https://app.example.com', 'https://admin.example.com']


def test_normalize_database_url():
    assert normalize_database_url('postgres://h/db') == 'postgresql://h/db'
    assert normalize_database_url('sqlite:///x.db') == 'sqlite:///x.db'


def test_config_name_detection(clean_env):
    assert get_config_name() == 'development'
    clean_env.setenv('CI', 'true')
    assert get_config_name() == 'testing'
    clean_env.setenv('FLASK_ENV', 'production')
    assert get_config_name() == 'production'
