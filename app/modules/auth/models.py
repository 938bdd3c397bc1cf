# Users live in Supabase Auth (auth.users); no application table is owned here.
# Every application table references the auth user through user_id.

"""
Supabase Auth user fields read by this module:
- id: uuid
- email: text
- user_metadata: jsonb - {"full_name": "..."} set at registration
- created_at: timestamp
"""
