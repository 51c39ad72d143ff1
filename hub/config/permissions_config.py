"""
Authorization policy table.

Every route is gated by a (resource, action) pair looked up here. The value
is the set of profile roles allowed to perform it. Roles do not inherit from
each other: if admins may do something, "admin" is listed explicitly.
"""

from typing import Dict, FrozenSet, List, Tuple

ROLES = ["admin", "sector_admin", "subsector_admin", "user"]
DEFAULT_ROLE = "user"

ADMIN_ONLY = ("admin",)
SECTOR_MANAGERS = ("admin", "sector_admin")
CONTENT_MANAGERS = ("admin", "sector_admin", "subsector_admin")
EVERYONE = tuple(ROLES)

CRUD = ("read", "create", "update", "delete")

# resource -> description and action -> roles
MODULES = {
    "users": {
        "description": "Portal user accounts and roles",
        "actions": {
            "read": ADMIN_ONLY,
            "create": ADMIN_ONLY,
            "update_role": ADMIN_ONLY,
            "reset_password": ADMIN_ONLY,
            "approve_access": ADMIN_ONLY,
        },
    },
    "sectors": {
        "description": "Organizational sectors",
        "actions": {
            "read": SECTOR_MANAGERS,
            "create": ADMIN_ONLY,
            "update": ADMIN_ONLY,
            "delete": ADMIN_ONLY,
            "manage_admins": ADMIN_ONLY,
        },
    },
    "subsectors": {
        "description": "Subsectors inside a sector",
        "actions": {action: SECTOR_MANAGERS for action in CRUD},
    },
    "subsector_admins": {
        "description": "Users administering a subsector",
        "actions": {"read": SECTOR_MANAGERS, "create": SECTOR_MANAGERS, "delete": SECTOR_MANAGERS},
    },
    "banners": {
        "description": "Home page banners",
        "actions": {**{action: ADMIN_ONLY for action in CRUD}, "reorder": ADMIN_ONLY},
    },
    "gallery": {
        "description": "Global image gallery",
        "actions": {**{action: ADMIN_ONLY for action in CRUD}, "upload": ADMIN_ONLY},
    },
    "sector_media": {
        "description": "Videos and images published by a sector",
        "actions": {action: SECTOR_MANAGERS for action in CRUD},
    },
    "subsector_media": {
        "description": "Videos and images published by a subsector",
        "actions": {action: CONTENT_MANAGERS for action in CRUD},
    },
    "sector_content": {
        "description": "News and events published by a sector",
        "actions": {**{action: SECTOR_MANAGERS for action in CRUD}, "publish": SECTOR_MANAGERS},
    },
    "subsector_content": {
        "description": "News and events published by a subsector",
        "actions": {**{action: CONTENT_MANAGERS for action in CRUD}, "publish": CONTENT_MANAGERS},
    },
    "content_overview": {
        "description": "Events, messages and documents of every sector and subsector",
        "actions": {**{action: ADMIN_ONLY for action in CRUD}, "publish": ADMIN_ONLY},
    },
    "general_news": {
        "description": "Company-wide news ranked by priority",
        "actions": {**{action: ADMIN_ONLY for action in CRUD}, "publish": ADMIN_ONLY},
    },
    "dashboard_videos": {
        "description": "Videos shown on the home page",
        "actions": {"upload": ADMIN_ONLY},
    },
    "sector_team": {
        "description": "Members listed on a sector page",
        "actions": {"read": EVERYONE, "create": SECTOR_MANAGERS, "update": SECTOR_MANAGERS, "delete": SECTOR_MANAGERS},
    },
    "subsector_team": {
        "description": "Members listed on a subsector page",
        "actions": {"read": EVERYONE, "create": CONTENT_MANAGERS, "update": CONTENT_MANAGERS, "delete": CONTENT_MANAGERS},
    },
    "collections": {
        "description": "Curated collections of images and videos",
        "actions": {
            "read": EVERYONE,
            "create": ADMIN_ONLY,
            "update": ADMIN_ONLY,
            "delete": ADMIN_ONLY,
            "manage_items": ADMIN_ONLY,
            "upload": ADMIN_ONLY,
        },
    },
    "economic_indicators": {
        "description": "Economic indicators shown on the home page",
        "actions": {"read": EVERYONE, "create": ADMIN_ONLY, "update": ADMIN_ONLY, "delete": ADMIN_ONLY},
    },
    "system_links": {
        "description": "Shortcuts to internal systems",
        "actions": {"read": EVERYONE, "create": ADMIN_ONLY, "update": ADMIN_ONLY, "delete": ADMIN_ONLY},
    },
    "work_locations": {
        "description": "Branches and offices",
        "actions": {"read": EVERYONE, "create": ADMIN_ONLY, "update": ADMIN_ONLY, "delete": ADMIN_ONLY},
    },
    "positions": {
        "description": "Job positions",
        "actions": {"read": EVERYONE, "create": ADMIN_ONLY, "update": ADMIN_ONLY, "delete": ADMIN_ONLY},
    },
    "notifications": {
        "description": "Notifications delivered to users",
        "actions": {"read": EVERYONE, "update": EVERYONE, "delete": EVERYONE, "send": CONTENT_MANAGERS},
    },
    "notification_groups": {
        "description": "Named recipient groups for notifications",
        "actions": {"read": EVERYONE, "create": CONTENT_MANAGERS},
    },
    "dashboard": {
        "description": "Home page aggregates",
        "actions": {"read": EVERYONE},
    },
}


def get_policy_table() -> Dict[Tuple[str, str], FrozenSet[str]]:
    """Flatten MODULES into {(resource, action): roles}."""
    table = {}
    for resource, config in MODULES.items():
        for action, roles in config["actions"].items():
            unknown = set(roles) - set(ROLES)
            if unknown:
                raise ValueError(f"Unknown roles {sorted(unknown)} in policy for {resource}:{action}")
            table[(resource, action)] = frozenset(roles)
    return table


POLICY = get_policy_table()


def allowed_roles(resource: str, action: str) -> FrozenSet[str]:
    """Roles allowed to perform action on resource. Unknown pairs allow nobody."""
    return POLICY.get((resource, action), frozenset())


def is_allowed(role: str, resource: str, action: str) -> bool:
    return role in allowed_roles(resource, action)


def grants_for_role(role: str) -> List[str]:
    """All "resource:action" names the role may perform, sorted."""
    return sorted(f"{resource}:{action}" for (resource, action), roles in POLICY.items() if role in roles)
