"""User-facing crawl options."""