# Supabase tables: sector_videos, subsector_videos, sector_images, subsector_images
# Buckets: videos (uploaded video files), images (image files and video thumbnails)

"""
Video tables (<scope> is sector or subsector, <scope>_id references it):

<scope>_videos:
- id: uuid (primary key)
- <scope>_id: uuid (not null)
- title: text (not null)
- description: text (nullable)
- video_url: text (not null) - YouTube URL or public storage URL
- thumbnail_url: text (nullable)
- upload_type: text ('youtube' | 'upload', default 'youtube')
- file_path: text (nullable) - object key in the videos bucket for uploads
- file_size: bigint (nullable)
- mime_type: text (nullable)
- is_published: boolean (default true)
- is_featured: boolean (default false)
- order_index: integer
- created_by: uuid
- created_at / updated_at: timestamp

Image tables:

<scope>_images:
- id, <scope>_id, title, description
- image_url: text (not null)
- thumbnail_url: text (nullable)
- file_path: text (nullable) - object key in the images bucket
- is_published, is_featured, order_index, created_by, created_at, updated_at

At most one row per scope should have is_featured = true. This is kept by
clearing siblings before setting a row featured, not by a DB constraint.
"""
