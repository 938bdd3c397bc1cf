# Supabase table: themes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- slug: text (not null) - fixed at creation, [a-z][a-z0-9-]*; source of the text domain and PHP function prefix
- description: text (nullable)
- version: text (not null, default: '1.0.0')
- author: text (nullable)
- author_uri: text (nullable)
- theme_uri: text (nullable)
- tags: text (nullable) - comma-separated
- thumbnail: text (nullable)
- css_styles: text (nullable) - appended verbatim to style.css
- js_scripts: text (nullable)
- php_code: text (nullable) - appended verbatim to functions.php
- status: text (not null, default: 'draft') - values: draft, published
- validation_issues: text[] (nullable) - php -l findings from the last save
- user_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
