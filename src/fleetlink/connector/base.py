from abc import abstractmethod

from fleetlink.conduit.base import Conduit, ConduitFactory


class ConnectorError(Exception):
    """ Indicates an error condition with a connection. """


class ConnectionNotConnectedError(ConnectorError):
    """ Indicates a connection is in the disconnected state when a connection is required. """


class Connector(ConduitFactory):
    """ A connector describes an endpoint to which a conduit can be established.
        Calling the connector opens a new conduit to the endpoint. """

    @property
    @abstractmethod
    def endpoint(self):
        """ the endpoint that this connector reaches out to """
        raise NotImplementedError

    def __call__(self) -> Conduit:
        """
        Opens a new conduit to the endpoint.
        Raises ConnectorError if the conduit cannot be established.
        """
        return self._connect()

    @abstractmethod
    def _connect(self) -> Conduit:
        """ Template method for subclasses to perform the connection.
            If connection is not possible, an exception should be thrown
        """
        raise NotImplementedError
