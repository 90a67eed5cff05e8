"""ScanMyCarbs backend."""
