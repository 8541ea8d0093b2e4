# =============================================================================
# bridge_core/data/schema.py
# SQL provisioning script for the Supabase project
# =============================================================================
"""
Run PROVISIONING_SQL once in the Supabase SQL editor. Column names are
quoted camelCase so rows round-trip unchanged between the JSON records
kept locally and the remote tables.
"""

from bridge_core.models import DEFAULT_SETTINGS

PUBLIC_READ_TABLES = (
    "settings",
    "products",
    "categories",
    "subcategories",
    "carousel_slides",
    "articles",
)


def _settings_ddl() -> str:
    """One column per SiteSettings field, typed from the defaults."""
    columns = ["  id text primary key default 'global'"]
    for name, value in DEFAULT_SETTINGS.items():
        if name == "id":
            continue
        if isinstance(value, bool):
            sql_type = "boolean"
        elif isinstance(value, (int, float)):
            sql_type = "numeric"
        elif isinstance(value, (list, dict)):
            sql_type = "jsonb"
        else:
            sql_type = "text"
        columns.append(f'  "{name}" {sql_type}')
    return "create table if not exists public.settings (\n" + ",\n".join(columns) + "\n);"


TABLE_DDL = {
    "settings": _settings_ddl(),
    "products": """
create table if not exists public.products (
  id text primary key,
  name text not null,
  sku text,
  price numeric default 0,
  "affiliateLink" text,
  "categoryId" text,
  "subCategoryId" text,
  description text,
  features jsonb default '[]'::jsonb,
  specifications jsonb default '{}'::jsonb,
  media jsonb default '[]'::jsonb,
  "discountRules" jsonb default '[]'::jsonb,
  reviews jsonb default '[]'::jsonb,
  "isDirectSale" boolean default false,
  "stockQuantity" integer,
  "createdAt" bigint
);""",
    "categories": """
create table if not exists public.categories (
  id text primary key,
  name text not null,
  icon text,
  image text,
  description text
);""",
    "subcategories": """
create table if not exists public.subcategories (
  id text primary key,
  "categoryId" text,
  name text not null
);""",
    "carousel_slides": """
create table if not exists public.carousel_slides (
  id text primary key,
  image text,
  type text default 'image',
  title text,
  subtitle text,
  cta text
);""",
    "enquiries": """
create table if not exists public.enquiries (
  id text primary key,
  name text,
  email text,
  whatsapp text,
  subject text,
  message text,
  "createdAt" bigint,
  status text default 'unread'
);""",
    "orders": """
create table if not exists public.orders (
  id text primary key,
  "userId" text,
  "customerName" text,
  "customerEmail" text,
  "shippingAddress" text,
  total numeric,
  status text,
  "paymentMethod" text,
  items jsonb default '[]'::jsonb,
  "createdAt" bigint
);
create table if not exists public.order_items (
  id text primary key,
  "orderId" text,
  "productId" text,
  "productName" text,
  quantity integer,
  price numeric
);""",
    "articles": """
create table if not exists public.articles (
  id text primary key,
  title text,
  excerpt text,
  content text,
  author text,
  image text,
  "createdAt" bigint
);""",
    "admin_users": """
create table if not exists public.admin_users (
  id text primary key,
  name text,
  email text unique,
  role text default 'admin',
  permissions jsonb default '[]'::jsonb,
  password text,
  phone text,
  address text,
  "createdAt" bigint,
  "lastActive" bigint
);""",
    "product_stats": """
create table if not exists public.product_stats (
  "productId" text primary key,
  views integer default 0,
  clicks integer default 0,
  shares integer default 0,
  "totalViewTime" numeric default 0,
  "lastUpdated" bigint
);""",
    "subscribers": """
create table if not exists public.subscribers (
  id text primary key,
  email text unique,
  "createdAt" bigint
);""",
    "training_modules": """
create table if not exists public.training_modules (
  id text primary key,
  title text,
  platform text,
  description text,
  steps jsonb default '[]'::jsonb
);""",
    "profiles": """
create table if not exists public.profiles (
  id text primary key,
  email text,
  "fullName" text,
  phone text,
  building text,
  street text,
  suburb text,
  city text,
  province text,
  "postalCode" text,
  "updatedAt" bigint
);""",
    "traffic_logs": """
create table if not exists public.traffic_logs (
  id text primary key,
  type text,
  text text,
  time text,
  timestamp bigint,
  source text
);""",
}


def _policies(table: str) -> str:
    statements = [f"alter table public.{table} enable row level security;"]
    if table in PUBLIC_READ_TABLES:
        statements.append(
            f'create policy "public read {table}" on public.{table} for select using (true);'
        )
    statements.append(
        f'create policy "authenticated write {table}" on public.{table} '
        f"for all to authenticated using (true) with check (true);"
    )
    return "\n".join(statements)


def build_provisioning_sql() -> str:
    """Full script: tables, row level security, media bucket."""
    parts = []
    for table, ddl in TABLE_DDL.items():
        parts.append(ddl.strip())
        parts.append(_policies(table))
    # Anonymous storefront visitors write enquiries, orders, stats and logs
    for table in ("enquiries", "orders", "order_items", "product_stats", "subscribers", "traffic_logs"):
        parts.append(
            f'create policy "anon insert {table}" on public.{table} for insert to anon with check (true);'
        )
    parts.append(
        "insert into storage.buckets (id, name, public) values ('media', 'media', true) "
        "on conflict (id) do nothing;"
    )
    return "\n\n".join(parts) + "\n"


PROVISIONING_SQL = build_provisioning_sql()
