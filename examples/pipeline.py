from tagline import Context, from_context, new_group, with_group, with_tag


def authenticate(ctx: Context, user_id: str) -> Context:
    return with_tag(ctx, "user_id", user_id)


def query(ctx: Context) -> Context:
    return with_group(ctx, new_group({"service": "database", "status": "200"}))


def fail(ctx: Context) -> Context:
    return with_tag(ctx, "status", "500")


ctx = with_tag(Context.background(), "env", "prod")
ctx = authenticate(ctx, "42")
ctx = query(ctx)
ctx = fail(ctx)

print(from_context(ctx).slice())
