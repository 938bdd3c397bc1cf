# Supabase table: wordpress_sites
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- url: text (not null) - site root, the REST API lives at <url>/wp-json/
- api_url: text (nullable)
- username: text (nullable)
- password: text (nullable) - write-only, never returned by the API
- api_key: text (nullable) - write-only, never returned by the API
- user_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
