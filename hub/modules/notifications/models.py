# Supabase tables: notifications, notification_recipients, notification_groups, notification_group_members

"""
notifications:
- id: uuid (primary key)
- title: text (not null)
- message: text (not null)
- type: text (info | warning | success | error | system, default 'info')
- priority: text (low | normal | high | urgent, default 'normal')
- sender_id: uuid (references profiles.id)
- created_at: timestamp

notification_recipients:
- id: uuid (primary key)
- notification_id: uuid (references notifications.id, on delete cascade)
- recipient_id: uuid (references profiles.id)
- read_at: timestamp (nullable; null means unread)
- created_at: timestamp

notification_groups:
- id, name, description, sector_id (nullable), subsector_id (nullable)
- created_by: uuid
- is_active: boolean (default true)

notification_group_members:
- id, group_id (references notification_groups.id), user_id (references profiles.id)
"""
