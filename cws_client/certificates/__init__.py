# cws_client/certificates/__init__.py
# Keystore handling and certificate/key format conversion
