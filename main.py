from rich.pretty import pprint

from commandeer import *

application = Application("tool", [Option("verbose", "v")])

server = application.command("server", aliases=["srv"])
listing = server.sub_command("list", default=True, elements=[Argument("filter")])
listing.option_command("do", "D")
server.sub_command("add", elements=[
    Argument("host", Argument.REQUIRED),
    Option("port", "p", Option.REQUIRED_VALUE | Option.INTEGER, default=80),
])


if __name__ == '__main__':
    pprint(application)
    pprint(invoke(application, context=ResolverContext(shell=True)).parsed_args)
