"""
Grid toolkit configuration settings.

Importer properties used when loading CGMES models with the
geographical-location (GL) profile.

Dependencies: pydantic_settings
System role: Network import configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from gridviz.configs.base import BaseSettings


class GridSettings(BaseSettings):
    """Network import settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GRID_",
        case_sensitive=False,
        extra="ignore",
    )

    geo_post_processor: str = Field(
        default="cgmesGLImport",
        description="CGMES import post-processor that attaches position extensions",
    )
    geo_import_properties: dict[str, str] = Field(
        default={
            "iidm.import.cgmes.store-cgmes-model-as-network-extension": "true",
            "iidm.import.cgmes.create-busbar-section-for-every-connectivity-node": "true",
            "iidm.import.cgmes.create-cgmes-export-mapping": "true",
        },
        description="Extra importer properties applied with the GL profile",
    )

    def geo_profile_parameters(self) -> dict[str, str]:
        """
        Build the full importer property map for a GL-profile load.

        Returns:
            dict[str, str]: Importer properties including the post-processor
        """
        parameters = {"iidm.import.cgmes.post-processors": self.geo_post_processor}
        parameters.update(self.geo_import_properties)
        return parameters
