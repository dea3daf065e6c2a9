"""Static paths, package sets and endpoints used during provisioning."""

DIR_MODE = 0o755
FILE_MODE = 0o644
SECRET_FILE_MODE = 0o640

DEFAULT_DOMAIN = "localhost"
DEFAULT_WP_DIR = "/var/www/html"
DEFAULT_LOG_FILE = "/var/log/wp-install.log"
DEFAULT_DB_NAME = "wordpress"
DEFAULT_DB_USER = "wordpress"

WEB_USER = "www-data"
WEB_GROUP = "www-data"

BASE_PACKAGES = (
    "curl",
    "wget",
    "gnupg",
    "ca-certificates",
    "software-properties-common",
    "lsb-release",
    "debian-keyring",
    "debian-archive-keyring",
    "apt-transport-https",
    "unzip",
    "ufw",
)

PHP_PPA = "ppa:ondrej/php"
PHP_PACKAGES = (
    "php-fpm",
    "php-mysql",
    "php-curl",
    "php-xml",
    "php-mbstring",
    "php-zip",
    "php-gd",
    "php-opcache",
    "php-xsl",
    "php-intl",
    "php-bz2",
)
PHP_TUNING_FILENAME = "99-wpprovisioner.ini"

DATABASE_PACKAGES = ("mariadb-server", "mariadb-client")
DATABASE_UNIT = "mariadb"

CADDY_UNIT = "caddy"
CADDY_KEY_URL = "https://dl.cloudsmith.io/public/caddy/stable/gpg.key"
CADDY_KEYRING = "/usr/share/keyrings/caddy-stable-archive-keyring.gpg"
CADDY_SOURCES_LIST = "/etc/apt/sources.list.d/caddy-stable.list"
CADDY_SOURCE_LINE = (
    f"deb [signed-by={CADDY_KEYRING}] "
    "https://dl.cloudsmith.io/public/caddy/stable/deb/debian any-version main"
)
CADDYFILE_PATH = "/etc/caddy/Caddyfile"

WORDPRESS_ARCHIVE_URL = "https://wordpress.org/latest.tar.gz"
WORDPRESS_SALT_URL = "https://api.wordpress.org/secret-key/1.1/salt/"
WORDPRESS_SALT_KEYS = (
    "AUTH_KEY",
    "SECURE_AUTH_KEY",
    "LOGGED_IN_KEY",
    "NONCE_KEY",
    "AUTH_SALT",
    "SECURE_AUTH_SALT",
    "LOGGED_IN_SALT",
    "NONCE_SALT",
)

FIREWALL_RULES = ("OpenSSH", "80,443/tcp")
