"""
Helpers shared by the codec, the textual mapping and the wallet.
"""
