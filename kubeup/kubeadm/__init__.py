"""kubeadm configuration."""

from .config import (
    add_target_information,
    marshal_init_configuration,
    new_init_configuration,
    set_container_images,
)

__all__ = [
    "add_target_information",
    "marshal_init_configuration",
    "new_init_configuration",
    "set_container_images",
]
