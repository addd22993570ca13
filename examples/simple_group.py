from tagline import Group, new_group

group = new_group({"env": "prod"})
print(group.slice())

group.add("service", "database")
group.addf("status", "%d", 500)
print(group.slice())

print(group.get("region"), group.lookup("region"))

group.merge(Group({"status": "200", "region": "us-east1"}))
print(group.map())
