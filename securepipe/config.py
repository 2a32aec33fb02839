"""
Configuration management for securepipe.

Settings have built-in defaults and can be overridden from the
environment (SECUREPIPE_* variables) or by the CLI. Key material is
never part of the configuration: every endpoint generates its keys
fresh at startup.
"""

import logging
import os
from typing import Mapping, Optional

from .protocol.frame import (
    DEFAULT_MAX_FRAME_SIZE,
    FRAMING_LENGTH_PREFIXED,
    FRAMING_MODES,
    MIN_FRAME_SIZE,
)

ENV_PREFIX = "SECUREPIPE_"


class ConfigError(Exception):
    """Raised when configuration values are invalid."""
    pass


class SecurePipeConfig:
    """
    Runtime settings shared by dialers and servers.
    """
    
    def __init__(self, connect_timeout: float = 2.0,
                 max_frame_size: int = DEFAULT_MAX_FRAME_SIZE,
                 framing: str = FRAMING_LENGTH_PREFIXED,
                 bind_host: str = "0.0.0.0",
                 log_level: str = "INFO"):
        """
        Initialize configuration.
        
        Args:
            connect_timeout: Seconds allowed for Dial to establish TCP
            max_frame_size: Largest frame (nonce + sealed) accepted or sent
            framing: "length-prefixed" or "single-read"
            bind_host: Interface the server listens on
            log_level: Logging level name for the CLI
            
        Raises:
            ConfigError: If any value is invalid
        """
        self.connect_timeout = connect_timeout
        self.max_frame_size = max_frame_size
        self.framing = framing
        self.bind_host = bind_host
        self.log_level = log_level.upper()
        
        self.validate()
    
    def validate(self) -> None:
        """
        Check every setting.
        
        Raises:
            ConfigError: On the first invalid value
        """
        if not self.connect_timeout > 0:
            raise ConfigError(f"connect_timeout must be positive, got {self.connect_timeout}")
        if self.max_frame_size <= MIN_FRAME_SIZE:
            raise ConfigError(
                f"max_frame_size must exceed {MIN_FRAME_SIZE} bytes, got {self.max_frame_size}"
            )
        if self.max_frame_size > 0xFFFFFFFF:
            raise ConfigError("max_frame_size must fit in a 32-bit length prefix")
        if self.framing not in FRAMING_MODES:
            raise ConfigError(
                f"framing must be one of {', '.join(FRAMING_MODES)}, got {self.framing!r}"
            )
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"Unknown log level: {self.log_level}")
    
    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'SecurePipeConfig':
        """
        Build configuration from SECUREPIPE_* environment variables.
        
        Args:
            environ: Mapping to read instead of os.environ
            
        Returns:
            Validated configuration
            
        Raises:
            ConfigError: If a variable cannot be parsed
        """
        if environ is None:
            environ = os.environ
        
        kwargs = {}
        
        timeout = environ.get(ENV_PREFIX + "CONNECT_TIMEOUT")
        if timeout is not None:
            try:
                kwargs['connect_timeout'] = float(timeout)
            except ValueError:
                raise ConfigError(f"Invalid {ENV_PREFIX}CONNECT_TIMEOUT: {timeout!r}")
        
        max_frame = environ.get(ENV_PREFIX + "MAX_FRAME_SIZE")
        if max_frame is not None:
            try:
                kwargs['max_frame_size'] = int(max_frame)
            except ValueError:
                raise ConfigError(f"Invalid {ENV_PREFIX}MAX_FRAME_SIZE: {max_frame!r}")
        
        for key in ('framing', 'bind_host', 'log_level'):
            value = environ.get(ENV_PREFIX + key.upper())
            if value is not None:
                kwargs[key] = value
        
        return cls(**kwargs)
    
    def replace(self, **changes) -> 'SecurePipeConfig':
        """Return a copy with some settings changed."""
        values = self.to_dict()
        values.update({k: v for k, v in changes.items() if v is not None})
        return SecurePipeConfig(**values)
    
    def to_dict(self) -> dict:
        return {
            'connect_timeout': self.connect_timeout,
            'max_frame_size': self.max_frame_size,
            'framing': self.framing,
            'bind_host': self.bind_host,
            'log_level': self.log_level,
        }
    
    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"SecurePipeConfig({fields})"


DEFAULT_CONFIG = SecurePipeConfig()
