from .settings import StoreConfig, load_config, is_valid_supabase_url

__all__ = ["StoreConfig", "load_config", "is_valid_supabase_url"]
