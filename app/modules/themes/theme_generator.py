"""
Render a theme, with its templates and components, into the files of a
classic WordPress theme.

``generate_theme`` always returns the six fixed files first (style.css,
functions.php, index.php, header.php, footer.php, sidebar.php), then one
file per template and one per component, in input order.
"""

from typing import List, Optional
from app.modules.components.schemas import ComponentResponse
from app.modules.templates.php_snippets import (
    slugify, php_identifier, generate_theme_function, generate_action_hook
)
from app.modules.templates.schemas import GeneratedFile
from app.modules.templates.template_generator import generate_template_file, generate_component_file
from app.modules.themes.schemas import ThemeDetail, ThemeResponse

DEFAULT_AUTHOR = "WordPress Theme Builder"
DEFAULT_VERSION = "1.0"


def text_domain(theme: ThemeResponse) -> str:
    return theme.slug or slugify(theme.name)


def function_prefix(theme: ThemeResponse) -> str:
    """PHP-safe prefix for the generated hook functions, e.g. ``my_theme`` for "My Theme"."""
    return php_identifier(text_domain(theme), theme.name)


def generated_function_names(theme: ThemeResponse) -> List[str]:
    prefix = function_prefix(theme)
    return [f"{prefix}_setup", f"{prefix}_scripts", f"{prefix}_widgets_init"]


def _find_component(theme: ThemeDetail, component_type: str) -> Optional[ComponentResponse]:
    for component in theme.components or []:
        if component.type == component_type:
            return component
    return None


def _insertion(theme: ThemeDetail, component_type: str) -> str:
    component = _find_component(theme, component_type)
    if component and component.php_code:
        return component.php_code
    return ""


def generate_style_css(theme: ThemeResponse) -> str:
    header = [f"Theme Name: {theme.name or ''}"]
    if theme.theme_uri:
        header.append(f"Theme URI: {theme.theme_uri}")
    header.append(f"Description: {theme.description or ''}")
    header.append(f"Author: {theme.author or DEFAULT_AUTHOR}")
    if theme.author_uri:
        header.append(f"Author URI: {theme.author_uri}")
    header.append(f"Version: {theme.version or DEFAULT_VERSION}")
    tags = theme.tag_list()
    if tags:
        header.append(f"Tags: {', '.join(tags)}")
    header.append(f"Text Domain: {text_domain(theme)}")
    header_text = "\n".join(header)

    return f"""/*
{header_text}
*/

{theme.css_styles or ''}"""


def generate_functions_php(theme: ThemeResponse) -> str:
    domain = text_domain(theme)
    setup_fn, scripts_fn, widgets_fn = generated_function_names(theme)

    setup_body = f"""add_theme_support('title-tag');
add_theme_support('post-thumbnails');
add_theme_support('custom-logo');
add_theme_support('automatic-feed-links');
add_theme_support('html5', array(
    'search-form',
    'comment-form',
    'comment-list',
    'gallery',
    'caption',
));

register_nav_menus(array(
    'primary' => __('Primary Menu', '{domain}'),
    'footer' => __('Footer Menu', '{domain}'),
));"""

    scripts_body = f"""wp_enqueue_style('{domain}-style', get_stylesheet_uri(), array(), '1.0.0');
wp_enqueue_script('{domain}-script', get_template_directory_uri() . '/js/main.js', array(), '1.0.0', true);"""

    widgets_body = f"""register_sidebar(array(
    'name'          => __('Sidebar', '{domain}'),
    'id'            => 'sidebar-1',
    'description'   => __('Add widgets here to appear in your sidebar.', '{domain}'),
    'before_widget' => '<section id="%1$s" class="widget %2$s">',
    'after_widget'  => '</section>',
    'before_title'  => '<h2 class="widget-title">',
    'after_title'   => '</h2>',
));"""

    return f"""<?php
/**
 * {theme.name or ''} functions and definitions
 */

// Theme setup{generate_theme_function(setup_fn, body=setup_body)}{generate_action_hook('after_setup_theme', setup_fn)}
// Enqueue scripts and styles{generate_theme_function(scripts_fn, body=scripts_body)}{generate_action_hook('wp_enqueue_scripts', scripts_fn)}
// Register widget areas{generate_theme_function(widgets_fn, body=widgets_body)}{generate_action_hook('widgets_init', widgets_fn)}
{theme.php_code or ''}
"""


def generate_index_php(theme: ThemeResponse) -> str:
    return """<?php
/**
 * The main template file
 */

get_header();
?>

<main id="main" class="site-main">
    <?php
    if (have_posts()) :
        while (have_posts()) :
            the_post();
            get_template_part('template-parts/content', get_post_type());
        endwhile;

        the_posts_navigation();
    else :
        get_template_part('template-parts/content', 'none');
    endif;
    ?>
</main>

<?php
get_sidebar();
get_footer();
"""


def generate_header_php(theme: ThemeDetail) -> str:
    domain = text_domain(theme)
    return f"""<?php
/**
 * The header for our theme
 */
?>
<!DOCTYPE html>
<html <?php language_attributes(); ?>>
<head>
    <meta charset="<?php bloginfo('charset'); ?>">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <link rel="profile" href="https://gmpg.org/xfn/11">
    <?php wp_head(); ?>
</head>

<body <?php body_class(); ?>>
<?php wp_body_open(); ?>

<div id="page" class="site">
    <header id="masthead" class="site-header">
        <div class="site-branding">
            <?php
            if (has_custom_logo()) :
                the_custom_logo();
            else :
            ?>
                <h1 class="site-title"><a href="<?php echo esc_url(home_url('/')); ?>" rel="home"><?php bloginfo('name'); ?></a></h1>
            <?php
                $description = get_bloginfo('description', 'display');
                if ($description || is_customize_preview()) :
            ?>
                <p class="site-description"><?php echo $description; ?></p>
            <?php
                endif;
            endif;
            ?>
        </div>

        <nav id="site-navigation" class="main-navigation">
            <button class="menu-toggle" aria-controls="primary-menu" aria-expanded="false"><?php esc_html_e('Menu', '{domain}'); ?></button>
            <?php
            wp_nav_menu(array(
                'theme_location' => 'primary',
                'menu_id'        => 'primary-menu',
            ));
            ?>
        </nav>
    </header>

    <div id="content" class="site-content">
{_insertion(theme, 'header')}
"""


def generate_footer_php(theme: ThemeDetail) -> str:
    domain = text_domain(theme)
    return f"""<?php
/**
 * The footer for our theme
 */
?>

    </div><!-- #content -->

    <footer id="colophon" class="site-footer">
        <div class="site-info">
            <?php
            printf(
                esc_html__('© %1$s %2$s', '{domain}'),
                date('Y'),
                get_bloginfo('name')
            );
            ?>
        </div>
        <nav class="footer-navigation">
            <?php
            wp_nav_menu(array(
                'theme_location' => 'footer',
                'menu_id'        => 'footer-menu',
                'depth'          => 1,
            ));
            ?>
        </nav>
{_insertion(theme, 'footer')}
    </footer>
</div><!-- #page -->

<?php wp_footer(); ?>
</body>
</html>
"""


def generate_sidebar_php(theme: ThemeDetail) -> str:
    return f"""<?php
/**
 * The sidebar containing the main widget area
 */

if (!is_active_sidebar('sidebar-1')) {{
    return;
}}
?>

<aside id="secondary" class="widget-area">
    <?php dynamic_sidebar('sidebar-1'); ?>
{_insertion(theme, 'sidebar')}
</aside>
"""


def generate_theme(theme: ThemeDetail) -> List[GeneratedFile]:
    """Render every file of the theme. Pure: no I/O, no clock, no randomness."""
    files = [
        GeneratedFile(filename="style.css", content=generate_style_css(theme)),
        GeneratedFile(filename="functions.php", content=generate_functions_php(theme)),
        GeneratedFile(filename="index.php", content=generate_index_php(theme)),
        GeneratedFile(filename="header.php", content=generate_header_php(theme)),
        GeneratedFile(filename="footer.php", content=generate_footer_php(theme)),
        GeneratedFile(filename="sidebar.php", content=generate_sidebar_php(theme)),
    ]
    for template in theme.templates or []:
        files.append(generate_template_file(template))
    for component in theme.components or []:
        files.append(generate_component_file(component))
    return files
