# Supabase table: general_news
# Bucket: images (image_url, when hosted in storage)

"""
general_news:
- id: uuid (primary key)
- title: text (not null)
- summary: text (not null)
- content: text (not null)
- image_url: text (nullable)
- priority: integer (0-10, default 0) - higher first; "feature" adds one
- is_published: boolean (default false)
- created_by: uuid (references profiles.id)
- created_at: timestamptz
- updated_at: timestamptz
"""
