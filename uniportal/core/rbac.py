# uniportal/core/rbac.py

from fastapi import Depends

from uniportal.core.exceptions import RoleForbidden
from uniportal.core.principal import Principal
from uniportal.core.session import require_principal
from uniportal.models.user import normalize_role


def require_role(*allowed_roles):
    """
    Primary-role gate:
    - Accepts UserRole values or raw strings
    - Case-insensitive
    - No implicit bypass; list every role that may pass
    """

    normalized_allowed = {normalize_role(r) for r in allowed_roles}

    async def role_checker(principal: Principal = Depends(require_principal)) -> Principal:
        if principal.role_key not in normalized_allowed:
            raise RoleForbidden()
        return principal

    return role_checker
