"""
Service layer for FamilyLinX.

Provides business logic and data access for:
- Families, groups and members (with photo galleries)
- Recursive tree aggregation and slug navigation
- Albums and calendar events (with holiday import and recurrence)
- The admin overview and command line maintenance helpers
"""

from familylinx.services.tree import (
    Breadcrumb,
    GroupStats,
    GroupTree,
    HierarchyNode,
    PhotoEntry,
)

from familylinx.services.groups import (
    create_group,
    create_sub_group,
    delete_group,
    get_all_groups,
    get_group,
    is_slug_available,
    load_tree,
    require_family,
    require_group,
    update_group,
)

from familylinx.services.families import (
    OpenedFamily,
    create_family,
    delete_family,
    ensure_family,
    export_groups,
    find_root_group_by_slug,
    get_family,
    get_family_by_root_slug,
    import_groups,
    list_families,
)

from familylinx.services.members import (
    PhotoUpload,
    UploadResult,
    add_person_to_group,
    add_photo_to_person,
    delete_person,
    get_person,
    is_image_file,
    remove_photo_from_person,
    update_person,
    upload_photo,
    upload_photos_for_person,
)

from familylinx.services.navigation import (
    GroupPage,
    build_group_page,
    resolve_page,
)

from familylinx.services.albums import (
    AlbumCard,
    album_cards,
    create_album,
    delete_album,
    detect_platform,
    get_album,
    get_albums,
    get_albums_by_type,
    get_photo_thumbnail_url,
    get_platform_placeholder,
    get_thumbnail_limitation,
    get_video_thumbnail_url,
    platform_supports_thumbnail,
    update_album,
)

from familylinx.services.calendar import (
    EventOccurrence,
    create_calendar_event,
    delete_calendar_event,
    get_calendar_event,
    get_calendar_events,
    get_event_occurrences,
    get_events_by_date_range,
    get_upcoming_events,
    update_calendar_event,
)

from familylinx.services.holidays import (
    HOLIDAY_DATA,
    Holiday,
    import_holidays,
    list_countries,
)

from familylinx.services.admin import (
    AdminOverview,
    build_admin_overview,
)

__all__ = [
    # Tree
    "Breadcrumb",
    "GroupStats",
    "GroupTree",
    "HierarchyNode",
    "PhotoEntry",
    # Groups
    "create_group",
    "create_sub_group",
    "delete_group",
    "get_all_groups",
    "get_group",
    "is_slug_available",
    "load_tree",
    "require_family",
    "require_group",
    "update_group",
    # Families
    "OpenedFamily",
    "create_family",
    "delete_family",
    "ensure_family",
    "export_groups",
    "find_root_group_by_slug",
    "get_family",
    "get_family_by_root_slug",
    "import_groups",
    "list_families",
    # Members
    "PhotoUpload",
    "UploadResult",
    "add_person_to_group",
    "add_photo_to_person",
    "delete_person",
    "get_person",
    "is_image_file",
    "remove_photo_from_person",
    "update_person",
    "upload_photo",
    "upload_photos_for_person",
    # Navigation
    "GroupPage",
    "build_group_page",
    "resolve_page",
    # Albums
    "AlbumCard",
    "album_cards",
    "create_album",
    "delete_album",
    "detect_platform",
    "get_album",
    "get_albums",
    "get_albums_by_type",
    "get_photo_thumbnail_url",
    "get_platform_placeholder",
    "get_thumbnail_limitation",
    "get_video_thumbnail_url",
    "platform_supports_thumbnail",
    "update_album",
    # Calendar
    "EventOccurrence",
    "create_calendar_event",
    "delete_calendar_event",
    "get_calendar_event",
    "get_calendar_events",
    "get_event_occurrences",
    "get_events_by_date_range",
    "get_upcoming_events",
    "update_calendar_event",
    # Holidays
    "HOLIDAY_DATA",
    "Holiday",
    "import_holidays",
    "list_countries",
    # Admin
    "AdminOverview",
    "build_admin_overview",
]
