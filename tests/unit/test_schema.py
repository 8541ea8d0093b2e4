# =============================================================================
# tests/unit/test_schema.py
# Unit Tests for the Supabase provisioning script
# =============================================================================


class TestProvisioningSql:

    def test_every_registered_table_is_created(self):
        from bridge_core.data import PROVISIONING_SQL
        from bridge_core.models import TABLES

        for table in TABLES:
            assert f"create table if not exists public.{table} (" in PROVISIONING_SQL

    def test_policies_only_reference_created_tables(self):
        import re
        from bridge_core.data import PROVISIONING_SQL

        created = set(re.findall(r"create table if not exists public\.(\w+)", PROVISIONING_SQL))
        referenced = set(re.findall(r" on public\.(\w+)", PROVISIONING_SQL))

        assert "order_items" in created
        assert referenced <= created

    def test_settings_columns_follow_defaults(self):
        from bridge_core.data import build_provisioning_sql
        from bridge_core.models import DEFAULT_SETTINGS

        sql = build_provisioning_sql()
        settings_ddl = sql.split("create table if not exists public.settings (")[1].split(");")[0]

        for name in DEFAULT_SETTINGS:
            if name != "id":
                assert f'"{name}"' in settings_ddl

    def test_storefront_tables_are_publicly_readable(self):
        from bridge_core.data import PROVISIONING_SQL

        assert 'create policy "public read products"' in PROVISIONING_SQL
        assert 'create policy "public read admin_users"' not in PROVISIONING_SQL
