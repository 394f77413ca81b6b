"""Client configuration."""

from pydantic import BaseModel, ConfigDict, NonNegativeInt


class PluginClientOptions(BaseModel):
    """Options of a PluginClient. Unknown options are rejected."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_restarts: NonNegativeInt = 10
    """How many times plugins may restart the chain through `first` for a single request."""
