"""
Services around the controllers: configuration, credentials, controller
construction and the Qt poll bridge.

Import submodules directly; poll_signal_bridge requires PyQt5.
"""
