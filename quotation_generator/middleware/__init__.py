from .auth import ApiClient, init_auth

__all__ = ['ApiClient', 'init_auth']
