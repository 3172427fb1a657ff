
HTTP_TIMEOUT = 30.0
DOWNLOAD_TIMEOUT = 3000.0
DOWNLOAD_CHUNK_SIZE = 8192
USER_AGENT = 'releasefetch/1.0'

VERSION_PLACEHOLDER = '{version}'

GITHUB_AUTH_TOKEN_ENV = 'GITHUB_AUTH_TOKEN'
GITHUB_TOKEN_ENV = 'GITHUB_TOKEN'
GHES_BASE_URL_ENV = 'GHES_BASE_URL'
GHES_UPLOAD_URL_ENV = 'GHES_UPLOAD_URL'
GHES_AUTH_TOKEN_ENV = 'GHES_AUTH_TOKEN'

CONSOLE_WIDTH_LIMIT = 300
