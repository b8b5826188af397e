"""
Credentials app - session credentials and the only way to obtain one.

- credential: the SessionCredential payload type
- session: read / verify / write / clear / refresh existing credentials
- handoff: the Identity Handoff Ceremony (external identity -> credential)
- middleware: the Entry Gate
- authentication: DRF authentication from the credential cookie

Minting lives in credentials._minting and is imported only inside this
package.
"""
