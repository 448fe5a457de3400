"""이벤트 유형 상수"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # characters
    CHARACTER_CREATED = "character_created"
    CHARACTER_UPDATED = "character_updated"
    CHARACTER_DELETED = "character_deleted"
    GEAR_UPDATED = "gear_updated"
    CHARACTERS_IMPORTED = "characters_imported"

    # guilds
    GUILD_CREATED = "guild_created"
    GUILD_DELETED = "guild_deleted"
    GUILD_APPLICATION_SUBMITTED = "guild_application_submitted"
    GUILD_APPLICATION_RESOLVED = "guild_application_resolved"
    GUILD_MEMBER_LEFT = "guild_member_left"
    GUILD_MEMBER_REMOVED = "guild_member_removed"

    # catalog
    SET_CREATED = "set_created"
    SET_UPDATED = "set_updated"
    SET_DELETED = "set_deleted"

    # users
    USER_SYNCED = "user_synced"
    USER_DELETED = "user_deleted"
