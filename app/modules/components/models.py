# Supabase table: components
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- type: text (not null) - header, footer and sidebar are merged into the matching theme file
- selector: text (nullable) - CSS selector, documentation only
- php_code: text (nullable)
- theme_id: uuid (foreign key to themes.id ON DELETE CASCADE, nullable)
- template_id: uuid (foreign key to templates.id ON DELETE CASCADE, nullable)
  CHECK ((theme_id IS NULL) <> (template_id IS NULL))
- validation_issues: text[] (nullable)
- user_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
