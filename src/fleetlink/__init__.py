"""


Satellite side of the fleet controller link

- Message: the sum type exchanged with the controller. One class per variant, in protocol.messages.
- Codec: frames a message as a big-endian u32 length followed by its MessagePack payload.
- Conduit: abstraction of a bi-directional channel. Combines 2 streams for reading and writing.
- Connector: opens a new conduit to an endpoint each time it is called.
- ControllerConnection: reads and writes whole messages on one conduit. Writers on any thread are
  serialized. The first failure poisons the connection; it never reconnects itself.
- ManagedControllerLink - runs on a background thread. Opens a conduit, lets the listener authenticate,
  then reads and dispatches messages until the connection fails. Failures to connect back off
  exponentially, 1 second doubling up to 30.
- listeners
 - DirectoryRouter: the proxy's listener. Keeps the linked backends by priority and the default route
   that arriving players are sent to.
 - NodeController: a backend's listener. Answers pings while the backend accepts players.


## Threading

Each satellite has one link thread. Message handlers run on that thread, in the order messages arrive.

Hosts call in from their own threads: the proxy's reconnect hook reads the default route, and operator
commands on a backend write to the connection. Both are guarded by locks; writes go through the
connection's write lock.

Link events are queued by the Satellite and delivered on the host's thread when it calls update().
"""
