from enum import Enum

class Role(str, Enum):
    ADMIN = 'ADMIN'
    CHEF = 'CHEF'
    WAITER = 'WAITER'
    CUSTOMER = 'CUSTOMER'

    @property
    def dashboard_path(self):
        return f"/dashboard/{self.value.lower()}"

STAFF_ROLES = frozenset({Role.ADMIN, Role.CHEF, Role.WAITER})

def parse_role(raw):
    """
    Canonical role for whatever the backend or a caller hands us:
    "admin", "Admin", "ROLE_ADMIN", " role_admin " and Role.ADMIN are all ADMIN.
    Returns None for anything unrecognised.
    """
    if raw is None:
        return None
    if isinstance(raw, Role):
        return raw
    name = str(raw).strip().upper()
    if name.startswith('ROLE_'):
        name = name[len('ROLE_'):]
    try:
        return Role(name)
    except ValueError:
        return None

def dashboard_path_for(raw):
    role = parse_role(raw)
    return role.dashboard_path if role else '/dashboard'
