from dataclasses import dataclass, fields
import yaml


@dataclass
class BaseConfig:
    """Base configuration with the column names shared by every stage."""
    # Core columns of the base (net) table
    id_column: str = 'ID'
    mz_column: str = 'MZ'
    rt_column: str = 'RT'

    # Combined "ID/MZ/RT" column some feature exports carry instead
    filename_column: str = 'Filename'
    filename_separator: str = '/'

    # Column holding the resolved compound label
    annotation_column: str = 'Final_Annotation'

    verbose: bool = True

    @classmethod
    def from_file(cls, file_path: str):
        """
        Creates a config instance by loading parameters from a YAML file.
        Any parameters in the YAML file will override the class defaults.
        """
        # If no file is provided, return a default config instance
        if not file_path:
            return cls()

        with open(file_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        # Only keep keys that are fields of this dataclass so that one shared
        # YAML file can feed every stage config.
        valid_fields = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in config_data.items() if k in valid_fields}

        return cls(**filtered_data)
