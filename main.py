from rich.pretty import pprint

from flagpole import *

describe(
    "Deploy a release to a cluster.",
    examples=(
        "main.py -v --env staging app.tar.gz",
        "DEPLOY_REPLICAS=3 main.py --email ops@example.com app.tar.gz",
    ),
)
register("verbose", "bool", "print every step", shorthand="v")
register("dry-run", "bool", "show what would change", shorthand="n")
register("force", "bool", "skip confirmations", shorthand="f")
register("env", "string", "target environment", default="dev", choices=("dev", "staging", "prod"))
register("replicas", "int", "number of replicas", default=1, env="DEPLOY_REPLICAS", group="scaling")
register("email", "string", "notify this address", pattern=EMAIL_PATTERN, required=False)
mutex("dry-run", "force")
require(1, "release archive")


if __name__ == '__main__':
    pprint(parse())
