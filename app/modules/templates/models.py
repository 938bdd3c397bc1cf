# Supabase table: templates
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- type: text (not null, default: 'page') - values: page, single, archive, home, search, 404, custom
- custom_type: text (nullable) - only set when type = 'custom'
- theme_id: uuid (foreign key to themes.id ON DELETE CASCADE, not null)
- php_code: text (nullable) - inserted verbatim before the Loop
- html_content: text (nullable)
- css_styles: text (nullable)
- js_scripts: text (nullable)
- status: text (not null, default: 'draft')
- validation_issues: text[] (nullable)
- user_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
