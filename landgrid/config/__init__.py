from .config import config, Config

__all__ = ['config', 'Config']
