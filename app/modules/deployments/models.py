# Supabase tables: deployments, deployment_files
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

deployments
- id: uuid (primary key)
- wordpress_site_id: uuid (foreign key to wordpress_sites.id, not null, on delete cascade)
- deployment_type: text (not null) - values: theme, template
- theme_id: uuid (foreign key to themes.id, nullable)
- template_id: uuid (foreign key to templates.id, nullable)
- status: text (not null, default: 'pending') - values: pending, in-progress, completed, failed
- logs: text (nullable) - newline separated, appended to
- user_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- completed_at: timestamp (nullable)
- check: exactly one of theme_id, template_id is not null

deployment_files
- id: uuid (primary key)
- deployment_id: uuid (foreign key to deployments.id, not null, on delete cascade)
- path: text (not null)
- type: text (not null) - file extension: php, css
- content: text (not null)
- created_at: timestamp (default: now())
"""
