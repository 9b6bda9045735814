"""
Created on 2026-03-02

@author: wf
"""

import os
import pathlib
from typing import Optional

from basemkit.yamlable import lod_storable


@lod_storable
class DjVuMetaConfig:
    """
    configuration for the DjVu metadata handler
    """

    # singleton
    _instance: Optional["DjVuMetaConfig"] = None

    # external DjVuLibre tools - None disables the corresponding feature
    djvu_renderer: Optional[str] = "ddjvu"
    djvu_dump: Optional[str] = "djvudump"
    djvu_to_xml: Optional[str] = "djvutoxml"
    djvu_txt: Optional[str] = "djvutxt"
    djvu_post_processor: Optional[str] = "pnmtojpeg"
    djvu_output_extension: str = "jpg"
    # files larger than this are expensive to thumbnail (10 MiB)
    expensive_size_limit: int = 10485760
    # seconds to wait for an external tool
    shell_timeout: Optional[float] = 60.0
    cache_path: Optional[str] = None
    cache_key_prefix: str = "file-djvu"
    # 0 means the entries never expire
    cache_ttl: int = 0

    def __post_init__(self):
        """
        make sure we set defaults
        """
        if self.cache_path is None:
            self.cache_path = os.path.join(DjVuMetaConfig.get_config_dir(), "cache")

    @classmethod
    def get_config_dir(cls) -> str:
        """
        the configuration directory $HOME/.djvumeta
        """
        config_dir = pathlib.Path.home() / ".djvumeta"
        return str(config_dir)

    @classmethod
    def get_config_file_path(cls) -> str:
        """
        Returns the standard location for the config file: $HOME/.djvumeta/config.yaml
        """
        return os.path.join(cls.get_config_dir(), "config.yaml")

    @classmethod
    def get_instance(cls, test: bool = False) -> "DjVuMetaConfig":
        """
        get my instance
        """
        if cls._instance is None:
            config_path = cls.get_config_file_path()
            if os.path.exists(config_path) and not test:
                # load_from_yaml_file is provided by the @lod_storable decorator
                instance = cls.load_from_yaml_file(config_path)
            else:
                # Return default instance if no config file found
                instance = cls()
            cls._instance = instance
        return cls._instance
