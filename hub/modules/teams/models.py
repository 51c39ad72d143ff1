# Supabase tables: sector_team_members, subsector_team_members

"""
<scope>_team_members (<scope> is sector or subsector):
- id: uuid (primary key)
- <scope>_id: uuid (not null)
- user_id: uuid (references profiles.id)
- position: text (nullable)
- created_at: timestamptz
- updated_at: timestamptz

sector_team_members only:
- is_from_subsector: boolean (default false) - copied from a subsector team
- subsector_id: uuid (nullable) - the subsector it was copied from

sector_admins.show_as_team_member: boolean - also list the admin on the team page
"""
