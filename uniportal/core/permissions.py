# uniportal/core/permissions.py

from dataclasses import dataclass
from typing import Tuple

from fastapi import Depends, Request
from loguru import logger

from uniportal.core.decisions import Decision, Reason
from uniportal.core.exceptions import MenuForbidden
from uniportal.core.role_menus import ROLE_MENUS, menu_paths, normalize_path
from uniportal.core.principal import Principal
from uniportal.core.session import require_principal


@dataclass(frozen=True)
class MenuPolicyConfig:
    """
    base_path:         only enforce under this prefix (e.g. '/staff')
    allow_if_no_config: roles without a menu entry are allowed everywhere
    super_roles:       roles that bypass the allow-list
    """

    base_path: str = "/staff"
    allow_if_no_config: bool = True
    super_roles: Tuple[str, ...] = ("admin", "superadmin", "administrator")


def is_super_role(role, super_roles) -> bool:
    r = str(role or "").strip().lower()
    return r in {str(x).strip().lower() for x in super_roles}


def is_path_allowed(role, requested_path, config: MenuPolicyConfig = MenuPolicyConfig(), menus=None) -> Decision:
    table = ROLE_MENUS if menus is None else menus

    base_norm = normalize_path(config.base_path)
    path_norm = normalize_path(requested_path)

    # Only enforce under the base path
    if not path_norm.startswith(base_norm):
        return Decision.allow(Reason.OutOfScope)

    r = str(role or "").strip().lower()

    if is_super_role(r, config.super_roles):
        return Decision.allow(Reason.SuperRole)

    if r not in table:
        if config.allow_if_no_config:
            return Decision.allow(Reason.NoPolicyConfigured)
        return Decision.deny(Reason.NoConfigDenied)

    cfg = table[r]
    if cfg is None:
        return Decision.allow(Reason.Unrestricted)

    if path_norm == base_norm:
        return Decision.allow(Reason.BasePath)

    if path_norm in menu_paths(cfg):
        return Decision.allow(Reason.Listed)

    return Decision.deny(Reason.NotListed)


def require_menu_permission(config: MenuPolicyConfig = MenuPolicyConfig(), menus=None):
    """Route dependency guarding a path prefix with the role allow-list."""

    async def menu_checker(request: Request, principal: Principal = Depends(require_principal)) -> Principal:
        decision = is_path_allowed(principal.role, request.url.path, config, menus)
        if not decision:
            logger.info(
                f"Menu access denied: role='{principal.role_key}' path='{request.url.path}' ({decision.reason.value})"
            )
            raise MenuForbidden()
        return principal

    return menu_checker
