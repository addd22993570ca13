from tagline import Context, Propagation, Tagline

for propagation in Propagation:
    tags = Tagline(propagation=propagation)

    root = tags.with_tag(Context.background(), "env", "prod")
    left = tags.with_tag(root, "branch", "left")
    right = tags.with_tag(root, "worker", "right")

    print(propagation.name)
    print("  root ", tags.from_context(root).slice())
    print("  left ", tags.from_context(left).slice())
    print("  right", tags.from_context(right).slice())
