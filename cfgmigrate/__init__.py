"""cfgmigrate - Migrate an application's configuration with its services quiesced."""

__version__ = "1.0.0"
