# Supabase tables: profiles, access_requests, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (unique)
- full_name: text
- role: text (user | sector_admin | subsector_admin | admin, default 'user')
- position_id: uuid (nullable, references positions.id)
- work_location_id: uuid (nullable, references work_locations.id)
- avatar_url: text (nullable)
- created_at / updated_at: timestamp

access_requests:
- id: uuid (primary key)
- email: text
- full_name: text
- position_id: uuid (nullable)
- work_location_id: uuid (nullable)
- status: text (pending | approved | rejected)
- processed_by: uuid (nullable, references profiles.id)
- processed_at: timestamp (nullable)
- created_at: timestamp

Profiles are created by a trigger on auth.users insert; this service only
upserts the descriptive columns and changes roles. Profiles are never
deleted here.
"""
