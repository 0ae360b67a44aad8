"""Global destructuring options.

Priority chain (highest to lowest):
  1. Init kwargs: passed by the application when building a policy
  2. Env vars: ``LOGSHAPE_*`` prefix
  3. Code defaults: baked into the model

The options are frozen: a policy reads them at construction and they
stay fixed for the policy's lifetime.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings


class DestructuringOptions(BaseSettings):
    """Process-wide switches consulted by the resolution engine.

    Attributes:
        omit_type_label: Do not tag structures with the entity class name.
        suppress_null_fields: Drop fields whose value is None instead of
            emitting an explicit null scalar. Applies at every depth and
            before any field rule is consulted.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "LOGSHAPE_",
    }

    omit_type_label: bool = False
    suppress_null_fields: bool = False
