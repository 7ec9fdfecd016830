"""
Driver adapters implementing the Session contract.

Imported by module so that only the driver in use needs to be loadable:
    from cqlexec.drivers.cassandra_session import CassandraSession
    from cqlexec.drivers.sqlalchemy_session import SQLAlchemySession
"""
