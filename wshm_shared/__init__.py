"""Protocol pieces shared by hypermedia clients and servers."""
