"""pwa-scaffold: turn a generated Next.js skeleton into an installable, i18n-aware PWA."""

__version__ = "0.1.0"
