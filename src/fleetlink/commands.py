"""
Operator commands of a backend server. The host parses the command line and calls the command with the
sender and the arguments. A command returns False when the arguments do not fit its usage.
"""
import logging
from abc import abstractmethod

from fleetlink.connector.base import ConnectionNotConnectedError
from fleetlink.node import NodeController

logger = logging.getLogger(__name__)


class CommandSender:
    """ whoever issued the command. unique_id is the uuid string of a player, or None for the console. """
    unique_id = None

    @abstractmethod
    def send_message(self, text):
        raise NotImplementedError


class NodeCommand:
    name = None
    usage = None

    def __init__(self, node: NodeController, log=logger):
        self.node = node
        self.logger = log

    @abstractmethod
    def __call__(self, sender: CommandSender, args) -> bool:
        raise NotImplementedError


class CloseCommand(NodeCommand):
    """ close <true|false>: opens or closes the backend to players. """
    name = 'close'
    usage = 'close <true|false>'

    choices = {'true': True, 'false': False}

    def __call__(self, sender: CommandSender, args) -> bool:
        if len(args) != 1 or args[0] not in self.choices:
            sender.send_message("usage: %s" % self.usage)
            return False
        value = self.choices[args[0]]
        self.node.set_accepting_players(value)
        sender.send_message("accepting players: %s" % ('yes' if value else 'no'))
        return True


class RequestCommand(NodeCommand):
    """ request <minigameKind>: asks the controller for a minigame server for the sender. """
    name = 'request'
    usage = 'request <minigameKind>'

    def __call__(self, sender: CommandSender, args) -> bool:
        if len(args) != 1 or not args[0]:
            sender.send_message("usage: %s" % self.usage)
            return False
        try:
            self.node.request(args[0], getattr(sender, 'unique_id', None))
        except ConnectionNotConnectedError as e:
            self.logger.info("request for %s failed: %s", args[0], e)
            sender.send_message("not connected to the controller, try again shortly")
        else:
            sender.send_message("you will be sent to a %s server shortly" % args[0])
        return True


def node_commands(node: NodeController):
    """ the commands bound to a node controller, by name. """
    return {command.name: command for command in (CloseCommand(node), RequestCommand(node))}
