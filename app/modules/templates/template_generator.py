"""
Render templates and components into WordPress theme files.

The output is deterministic: the same record always renders to the same
text, with user supplied ``php_code`` copied in verbatim.
"""

from typing import List
from app.modules.components.schemas import ComponentResponse
from app.modules.templates.php_snippets import slugify
from app.modules.templates.schemas import TemplateDetail, TemplateResponse, GeneratedFile

# WordPress template hierarchy file names
TEMPLATE_FILENAMES = {
    "page": "page.php",
    "single": "single.php",
    "archive": "archive.php",
    "home": "home.php",
    "search": "search.php",
    "404": "404.php",
}

DEFAULT_TEMPLATE_CONTENT = "    <!-- Default template content -->"
DEFAULT_COMPONENT_CONTENT = "    <!-- Component content -->"


def template_filename(template: TemplateResponse) -> str:
    """Map a template type to its hierarchy file; anything unknown lands in template-parts/."""
    filename = TEMPLATE_FILENAMES.get(template.type or "")
    if filename:
        return filename
    return f"template-parts/{slugify(template.name)}.php"


def component_filename(component: ComponentResponse) -> str:
    return f"template-parts/components/{slugify(component.name)}.php"


def _template_docblock(template: TemplateResponse) -> str:
    lines = [
        "/**",
        f" * Template Name: {template.name or ''}",
        f" * Description: {template.description or ''}",
    ]
    if template.type == "custom" and template.custom_type:
        lines.append(f" * Custom Type: {template.custom_type}")
    lines.append(" */")
    return "\n".join(lines)


def generate_template_file(template: TemplateResponse) -> GeneratedFile:
    content = f"""<?php
{_template_docblock(template)}

get_header();
?>

<main id="main" class="site-main">
{template.php_code or DEFAULT_TEMPLATE_CONTENT}

    <?php
    if (have_posts()) :
        while (have_posts()) :
            the_post();
            ?>
            <article id="post-<?php the_ID(); ?>" <?php post_class(); ?>>
                <header class="entry-header">
                    <?php the_title('<h1 class="entry-title">', '</h1>'); ?>
                </header>

                <div class="entry-content">
                    <?php the_content(); ?>
                </div>
            </article>
            <?php
            if (comments_open() || get_comments_number()) :
                comments_template();
            endif;
        endwhile;

        the_posts_navigation();
    else :
        ?>
        <p><?php esc_html_e('No content found.', 'theme'); ?></p>
        <?php
    endif;
    ?>
</main>

<?php
get_sidebar();
get_footer();
"""
    return GeneratedFile(filename=template_filename(template), content=content)


def generate_component_file(component: ComponentResponse) -> GeneratedFile:
    slug = slugify(component.name)
    docblock = [
        "/**",
        f" * Component: {component.name or ''}",
        f" * Description: {component.description or ''}",
    ]
    if component.selector:
        docblock.append(f" * Selector: {component.selector}")
    docblock.append(" */")
    docblock_text = "\n".join(docblock)

    content = f"""<?php
{docblock_text}
?>

<div class="component component-{slug}">
{component.php_code or DEFAULT_COMPONENT_CONTENT}
</div>
"""
    return GeneratedFile(filename=component_filename(component), content=content)


def generate_template(template: TemplateDetail) -> List[GeneratedFile]:
    """Render one template plus its direct components. No theme-level files."""
    files = [generate_template_file(template)]
    for component in template.components or []:
        files.append(generate_component_file(component))
    return files
