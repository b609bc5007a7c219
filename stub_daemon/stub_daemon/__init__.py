"""stub_daemon — in-process fake bitcoind for integration tests and demos."""
